import json


def domain_analysis_prompt(domain: str) -> str:
    return f"""As a career and learning path advisor, analyze the {domain} development path using the most current information available.

Cover {domain} career paths, required skills, industry trends and learning resources.

Respond ONLY with a JSON object in this exact format:
{{
    "overview": "A comprehensive overview of what {domain} development involves, its importance, and career prospects",
    "skills": [
        {{
            "name": "specific skill name",
            "description": "2-3 sentence description of this skill and why it matters",
            "priority": "high/medium/low",
            "level": "beginner/intermediate/advanced",
            "estimatedLearningTime": "x weeks/months",
            "resources": [
                {{
                    "name": "Platform or course name",
                    "url": "Direct URL to the specific course/resource",
                    "type": "platform/course/documentation/practice",
                    "difficulty": "beginner/intermediate/advanced",
                    "isFree": true,
                    "description": "What you'll learn",
                    "duration": "estimated completion time"
                }}
            ]
        }}
    ],
    "progression": {{
        "entry": {{"roles": [], "salaryRange": "", "yearsExperience": "", "certifications": [], "projects": []}},
        "intermediate": {{"roles": [], "salaryRange": "", "yearsExperience": "", "certifications": [], "projects": []}},
        "advanced": {{"roles": [], "salaryRange": "", "yearsExperience": "", "certifications": [], "projects": []}}
    }},
    "industryDemand": {{
        "level": "high/medium/low",
        "growthRate": "Annual growth rate percentage",
        "averageSalary": "Salary range by experience level in USD",
        "jobMarketSize": "Number of available positions",
        "trends": [],
        "requiredSkills": [],
        "softSkills": [],
        "topEmployers": [],
        "communities": [{{"name": "", "url": "", "type": "forum/discord/slack/subreddit", "memberCount": "", "focus": ""}}]
    }}
}}

IMPORTANT REQUIREMENTS:
1. Include at least 8 specific skills, with at least 2 each for beginner, intermediate, and advanced levels
2. For each skill, include 2-3 specific resources with working URLs (no placeholder URLs)
3. Provide named certifications with provider information
4. Give realistic project ideas for each level
5. DO NOT include any text outside the JSON structure"""


def skill_resources_prompt(skill: str, level: str) -> str:
    return f"""Find specific learning resources for {skill} at {level} level. Include:
1. Online courses with direct URLs (Coursera, Udemy, etc.)
2. Official documentation links
3. Video tutorials
4. Practice platforms
5. GitHub repositories for practice

Respond ONLY with a JSON object: {{"resources": [{{"name": "", "url": "", "type": "", "difficulty": "{level}", "isFree": true, "description": ""}}]}}"""


def daily_plan_prompt(domain: str, skills: list[str], level: str, duration: int) -> str:
    return f"""Create a detailed {duration}-day learning plan for {domain} development at {level} level.

Selected Skills: {', '.join(skills)}

Requirements:
1. Create exactly {duration} days of structured learning
2. Each day should have 2-4 specific, actionable tasks
3. Tasks should build progressively toward mastery
4. Include practical projects and hands-on activities
5. Provide estimated time for each task
6. Include relevant learning resources with actual URLs when possible

Return a JSON object with this exact structure:
{{
    "totalDuration": {duration},
    "level": "{level}",
    "domain": "{domain}",
    "skills": {json.dumps(skills)},
    "dailyTasks": [
        {{
            "day": 1,
            "focus": "Day focus/theme",
            "description": "What the learner will achieve this day",
            "tasks": [
                {{
                    "title": "Specific task title",
                    "description": "Task description with clear objectives",
                    "estimatedTime": "1-2 hours",
                    "resources": [{{"title": "Resource name", "url": "https://actual-working-url.com", "type": "tutorial/documentation/video/course"}}],
                    "deliverable": "What the learner should produce/complete"
                }}
            ]
        }}
    ]
}}

Make the plan practical, realistic, and focused on {level}-level learning."""


def insights_prompt(context: dict) -> str:
    paths = "; ".join(
        f"{p['title']} ({p['difficulty']}, {'Completed' if p['isCompleted'] else str(p['progress']) + '% progress'})"
        for p in context["learningPaths"]
    )
    return f"""Analyze the learning progress for user "{context['name']}" and provide personalized insights.

User Context:
- Experience Level: {context['experience']}
- Skills: {', '.join(context['skills']) or 'None specified'}
- Goals: {', '.join(context['goals']) or 'None specified'}
- Total Study Time: {context['totalStudyTime']} hours
- Courses Completed: {context['coursesCompleted']}
- Average Score: {context['averageScore']}%
- Learning Paths: {paths or 'None'}

Provide a JSON response with exactly this structure:
{{
  "strengths": ["3-4 specific strengths based on their progress"],
  "improvements": ["3-4 specific areas for improvement"],
  "recommendations": ["3-4 actionable recommendations"],
  "nextGoals": ["3-4 specific next learning goals"]
}}

Focus on being specific, actionable, and encouraging. Base insights on their actual progress data."""


def assessment_prompt(skill_level: str, domain: str, assessment_id: str) -> str:
    return f"""Generate a skill assessment quiz for a {skill_level} level learner in {domain}.

Requirements:
- Create 10 multiple-choice questions
- Mix of Easy (4 questions), Medium (4 questions), and Hard (2 questions)
- Each question should have 4 options with only one correct answer
- Include an explanation for each correct answer
- Assign points: Easy (10 pts), Medium (15 pts), Hard (20 pts)
- Total time limit: 30 minutes
- Passing score: 70%

Return ONLY a valid JSON object with this exact structure:
{{
  "assessment": {{
    "id": "{assessment_id}",
    "title": "Skill Assessment Title",
    "description": "Brief description",
    "difficulty": "{skill_level}",
    "totalQuestions": 10,
    "timeLimit": 30,
    "passingScore": 70
  }},
  "questions": [
    {{
      "id": 1,
      "question": "Question text?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "Explanation",
      "difficulty": "Easy",
      "points": 10
    }}
  ],
  "timeLimit": 1800
}}

Focus on practical, real-world {domain} concepts that test understanding rather than memorization."""


def daily_assessment_prompt(previous_results: list[dict]) -> str:
    history = "\n".join(
        f"Date: {r.get('date', 'N/A')}, Score: {r.get('percentage', 0)}%"
        for r in previous_results
    ) or "No previous results"
    return f"""Generate a quick daily assessment (5 questions) based on learning progress.

Previous Results:
{history}

Create questions that reinforce weak areas, introduce new concepts gradually, mix review and new
material, fit a 10-minute time limit and focus on practical application.

Return ONLY a JSON object with the same structure as a full assessment:
{{"assessment": {{...}}, "questions": [...], "timeLimit": 600}}"""


def assessment_analysis_prompt(result: dict, time_spent: float) -> str:
    lines = "".join(
        f"\n- {r['difficulty']} Question: {'Correct' if r['isCorrect'] else 'Incorrect'} ({r['points']}/{r['maxPoints']} pts)"
        for r in result["detailedResults"]
    )
    return f"""Analyze this assessment performance and provide personalized insights:

Performance Data:
- Score: {result['score']}/{result['totalScore']} points ({result['percentage']}%)
- Correct Answers: {result['correctAnswers']}/{result['totalQuestions']}
- Time Spent: {time_spent} minutes
- Grade: {result['grade']}

Question Analysis:{lines}

Provide the analysis in this JSON format:
{{
  "aiAnalysis": {{
    "overallPerformance": "Excellent|Good|Fair|Needs Improvement",
    "keyInsights": ["2-3 personalized insights"],
    "strengths": ["2-3 key strengths"],
    "weaknesses": ["2-3 areas needing improvement"],
    "learningPattern": "Learning pattern observed",
    "timeManagement": "Assessment of time usage"
  }},
  "recommendations": ["3-5 specific, actionable recommendations"],
  "nextLevelReadiness": {{"ready": true, "reasoning": "", "prerequisiteAreas": []}}
}}

Be encouraging but honest."""
