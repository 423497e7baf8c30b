"""Static content served when the text generator is unavailable."""
import copy
import math
import time

BASE_RESOURCE = {
    "name": "Online Tutorial",
    "url": "https://www.coursera.org/",
    "type": "course",
    "difficulty": "beginner",
    "isFree": False,
    "description": "Introduction to the fundamentals",
}


def _resource(**overrides) -> dict:
    return {**BASE_RESOURCE, **overrides}


def _skill(name, description, priority, level, time_estimate, **resource) -> dict:
    return {
        "name": name,
        "description": description,
        "priority": priority,
        "level": level,
        "estimatedLearningTime": time_estimate,
        "resources": [_resource(**resource)],
    }


FRONTEND_SKILLS = [
    _skill("HTML/CSS", "Foundational web technologies for structure and styling",
           "high", "beginner", "2-3 weeks", url="https://www.w3schools.com/html/"),
    _skill("JavaScript", "Programming language for interactive web applications",
           "high", "beginner", "4-6 weeks", url="https://javascript.info/"),
    _skill("React/Vue/Angular", "Modern frontend frameworks for building user interfaces",
           "medium", "intermediate", "6-8 weeks", difficulty="intermediate", url="https://react.dev/"),
    _skill("Responsive Design", "Creating websites that work on all devices",
           "medium", "intermediate", "3-4 weeks", difficulty="intermediate",
           url="https://developer.mozilla.org/en-US/docs/Learn/CSS/CSS_layout/Responsive_Design"),
]

BACKEND_SKILLS = [
    _skill("Server-side Programming", "A server runtime such as Node.js or Python web frameworks",
           "high", "beginner", "4-6 weeks", url="https://nodejs.org/en/learn/"),
    _skill("Database Management", "Working with SQL and NoSQL databases",
           "high", "beginner", "5-7 weeks", url="https://www.mongodb.com/developer/"),
    _skill("API Development", "Creating RESTful APIs and web services",
           "medium", "intermediate", "4-5 weeks", difficulty="intermediate", url="https://fastapi.tiangolo.com/"),
    _skill("Authentication & Security", "Implementing secure user authentication systems",
           "medium", "intermediate", "3-4 weeks", difficulty="intermediate", url="https://auth0.com/docs"),
]

FULLSTACK_SKILLS = [
    _skill("Frontend Technologies", "HTML, CSS, JavaScript, and modern frameworks",
           "high", "beginner", "8-10 weeks",
           url="https://www.freecodecamp.org/learn/front-end-development-libraries/"),
    _skill("Backend Development", "Server-side programming and database management",
           "high", "intermediate", "8-10 weeks", difficulty="intermediate", url="https://nodejs.org/"),
    _skill("DevOps & Deployment", "Cloud deployment and CI/CD practices",
           "medium", "advanced", "6-8 weeks", difficulty="advanced", url="https://aws.amazon.com/getting-started/"),
]

SECURITY_SKILLS = [
    _skill("Network Security Fundamentals", "Understanding network protocols and security principles",
           "high", "beginner", "4-6 weeks", url="https://www.cybrary.it/course/comptia-network-plus/"),
    _skill("Penetration Testing", "Ethical hacking techniques and vulnerability assessment",
           "high", "intermediate", "8-12 weeks", difficulty="intermediate", url="https://tryhackme.com/"),
    _skill("Security Tools & Frameworks", "Using tools like Metasploit, Burp Suite, and Nmap",
           "medium", "intermediate", "6-8 weeks", difficulty="intermediate", url="https://www.hackthebox.com/"),
    _skill("Incident Response", "Handling security breaches and forensic analysis",
           "medium", "advanced", "8-10 weeks", difficulty="advanced", url="https://www.sans.org/courses/"),
]

ML_SKILLS = [
    _skill("Python Programming", "Foundational programming for data analysis and ML",
           "high", "beginner", "4-6 weeks", url="https://www.python.org/about/gettingstarted/"),
    _skill("Data Analysis Libraries", "Pandas, NumPy, and Matplotlib for data manipulation",
           "high", "beginner", "3-4 weeks", url="https://pandas.pydata.org/docs/getting_started/index.html"),
    _skill("Machine Learning Algorithms", "Understanding and implementing ML algorithms",
           "medium", "intermediate", "8-10 weeks", difficulty="intermediate",
           url="https://scikit-learn.org/stable/getting_started.html"),
    _skill("Deep Learning", "Neural networks with TensorFlow and PyTorch",
           "low", "advanced", "10-12 weeks", difficulty="advanced", url="https://www.tensorflow.org/learn"),
]

DATA_SCIENCE_SKILLS = [
    _skill("Python Programming", "Foundational programming for data analysis",
           "high", "beginner", "4-6 weeks", url="https://www.python.org/about/gettingstarted/"),
    _skill("Data Analysis Libraries", "Pandas, NumPy for data manipulation",
           "high", "beginner", "3-4 weeks", url="https://pandas.pydata.org/docs/getting_started/index.html"),
    _skill("Data Visualization", "Creating visual representations with Matplotlib, Seaborn",
           "medium", "intermediate", "2-3 weeks", difficulty="intermediate",
           url="https://matplotlib.org/stable/tutorials/index.html"),
    _skill("Machine Learning Fundamentals", "Basic ML algorithms and principles",
           "medium", "intermediate", "6-8 weeks", difficulty="intermediate",
           url="https://scikit-learn.org/stable/getting_started.html"),
    _skill("Deep Learning", "Neural networks and advanced ML techniques",
           "low", "advanced", "8-10 weeks", difficulty="advanced", url="https://www.tensorflow.org/learn"),
]

DOMAIN_SKILLS = {
    "frontend": FRONTEND_SKILLS,
    "frontend developer": FRONTEND_SKILLS,
    "web": FRONTEND_SKILLS,
    "web development": FRONTEND_SKILLS,
    "backend": BACKEND_SKILLS,
    "backend developer": BACKEND_SKILLS,
    "fullstack": FULLSTACK_SKILLS,
    "fullstack developer": FULLSTACK_SKILLS,
    "security": SECURITY_SKILLS,
    "ethical hacker": SECURITY_SKILLS,
    "cybersecurity": SECURITY_SKILLS,
    "ml": ML_SKILLS,
    "machine learning": ML_SKILLS,
    "machine learning engineer": ML_SKILLS,
    "data science": DATA_SCIENCE_SKILLS,
}


def _default_skills(domain: str) -> list[dict]:
    return [
        _skill(f"Fundamentals of {domain}", f"Basic principles and concepts of {domain}",
               "high", "beginner", "3-4 weeks"),
        _skill(f"{domain} Best Practices", f"Standard methodologies and practices in {domain}",
               "high", "beginner", "2-3 weeks"),
        _skill(f"Intermediate {domain} Concepts", f"More advanced techniques and knowledge in {domain}",
               "medium", "intermediate", "4-6 weeks", difficulty="intermediate", url="https://www.udemy.com/"),
        _skill(f"Advanced {domain} Applications", f"Expert-level applications and implementation in {domain}",
               "medium", "advanced", "6-8 weeks", difficulty="advanced", url="https://www.edx.org/"),
    ]


def get_domain_fallback_skills(domain) -> list[dict]:
    """Skill table for ``domain``; never empty, never raises."""
    label = str(domain or "").strip() or "General"
    table = DOMAIN_SKILLS.get(label.lower())
    if table is None:
        return _default_skills(label)
    return copy.deepcopy(table)


def fallback_domain_analysis(domain: str) -> dict:
    label = str(domain or "").strip() or "General"
    return {
        "overview": f"Overview of {label} development and career opportunities",
        "skills": get_domain_fallback_skills(label),
        "progression": {
            "entry": {"roles": [f"Junior {label} Developer"]},
            "intermediate": {"roles": [f"Mid-level {label} Developer"]},
            "advanced": {"roles": [f"Senior {label} Developer"]},
        },
        "industryDemand": {"level": "medium"},
    }


def fallback_skill_resources(skill: str, level: str) -> list[dict]:
    wanted = (skill or "").strip().lower()
    for table in (FRONTEND_SKILLS, BACKEND_SKILLS, FULLSTACK_SKILLS, SECURITY_SKILLS,
                  ML_SKILLS, DATA_SCIENCE_SKILLS):
        for entry in table:
            if entry["name"].lower() == wanted:
                return copy.deepcopy(entry["resources"])
    return [
        _resource(name=f"{skill} Documentation", url="https://developer.mozilla.org/en-US/",
                  type="documentation", difficulty=level or "beginner", isFree=True,
                  description=f"Reference material for {skill}"),
        _resource(name=f"{skill} Course", difficulty=level or "beginner",
                  description=f"Structured {level or 'beginner'} course covering {skill}"),
    ]


def generate_fallback_daily_tasks(domain: str, skills: list[str], level: str, duration: int) -> list[dict]:
    """One entry per day, days numbered 1..duration."""
    skills = [s for s in skills if s] or [domain]
    per_skill = duration / len(skills)
    days = []
    for day in range(1, duration + 1):
        week = math.ceil(day / 7)
        index = min(int((day - 1) // per_skill), len(skills) - 1)
        skill = skills[index]
        days.append({
            "day": day,
            "focus": f"{skill} - Week {week}",
            "description": f"Focus on {skill} fundamentals and practical application",
            "tasks": [
                {
                    "title": f"Learn {skill} Basics",
                    "description": f"Study the fundamental concepts of {skill} for {level} level",
                    "estimatedTime": "2-3 hours",
                    "resources": [{
                        "title": f"{skill} Documentation",
                        "url": "https://developer.mozilla.org/en-US/",
                        "type": "documentation",
                    }],
                    "deliverable": f"Complete {skill} exercises",
                },
                {
                    "title": f"Practice {skill} Implementation",
                    "description": f"Build a small project using {skill}",
                    "estimatedTime": "1-2 hours",
                    "resources": [{
                        "title": "Practice Platform",
                        "url": "https://codepen.io/",
                        "type": "practice",
                    }],
                    "deliverable": f"Working {skill} example",
                },
            ],
        })
    return days


def fallback_daily_plan(domain: str, skills: list[str], level: str, duration: int) -> dict:
    return {
        "totalDuration": duration,
        "level": level,
        "domain": domain,
        "skills": list(skills),
        "dailyTasks": generate_fallback_daily_tasks(domain, skills, level, duration),
    }


def _question(qid, question, options, correct, explanation, difficulty, points) -> dict:
    return {
        "id": qid,
        "question": question,
        "options": options,
        "correctAnswer": correct,
        "explanation": explanation,
        "difficulty": difficulty,
        "points": points,
    }


ASSESSMENT_QUESTIONS = [
    _question(1, "What is the fundamental concept that defines modern software development?",
              ["Writing code quickly", "Problem-solving and logical thinking",
               "Using the latest frameworks", "Memorizing syntax"], 1,
              "Software development is fundamentally about problem-solving and breaking down complex "
              "problems into manageable solutions.", "Easy", 10),
    _question(2, "Which practice is most important for maintaining code quality?",
              ["Writing comments for every line", "Using the shortest variable names",
               "Following consistent coding standards", "Avoiding functions and modules"], 2,
              "Consistent coding standards make code readable, maintainable, and easier for teams to "
              "collaborate on.", "Easy", 10),
    _question(3, "What is the purpose of version control systems?",
              ["To make code run faster", "To track changes and collaborate on code",
               "To automatically fix bugs", "To compress file sizes"], 1,
              "Version control systems like Git help track changes, maintain history, and enable "
              "collaboration among developers.", "Easy", 10),
    _question(4, "Which approach leads to better software design?",
              ["Writing all code in one large function", "Breaking problems into smaller, manageable pieces",
               "Avoiding planning and documentation", "Using only global variables"], 1,
              "Modular design and breaking problems into smaller pieces leads to more maintainable and "
              "scalable software.", "Medium", 15),
    _question(5, "What is the most effective way to debug code?",
              ["Random trial and error", "Systematic investigation and testing",
               "Rewriting everything from scratch", "Ignoring the problem"], 1,
              "Systematic debugging involves understanding the problem, forming hypotheses, and testing "
              "them methodically.", "Medium", 15),
    _question(6, "Why is testing important in software development?",
              ["It slows down development", "It ensures code works as expected and prevents regressions",
               "It's only needed for large applications", "It replaces the need for documentation"], 1,
              "Testing helps ensure code reliability, catches bugs early, and provides confidence when "
              "making changes.", "Medium", 15),
    _question(7, "What characterizes clean, professional code?",
              ["As few lines as possible", "Readable, well-organized, and self-documenting",
               "Uses advanced features exclusively", "Has no comments or documentation"], 1,
              "Clean code is readable, well-organized, follows conventions, and can be easily understood "
              "by other developers.", "Medium", 15),
    _question(8, "How should you approach learning new technologies?",
              ["Learn everything at once", "Focus on fundamentals first, then build complexity",
               "Only read documentation without practice", "Copy code without understanding"], 1,
              "Building a strong foundation in fundamentals provides the framework for understanding more "
              "complex concepts.", "Hard", 20),
    _question(9, "What is the key to becoming a proficient developer?",
              ["Memorizing all possible syntax", "Consistent practice and continuous learning",
               "Using only the newest technologies", "Working in isolation"], 1,
              "Regular practice, continuous learning, and staying curious about new developments are "
              "essential for growth.", "Hard", 20),
    _question(10, "How do successful developers approach complex problems?",
              ["Try to solve everything immediately", "Break down problems, research, and iterate on solutions",
               "Avoid challenging problems", "Use only familiar approaches"], 1,
              "Successful problem-solving involves analysis, research, breaking down complexity, and "
              "iterative improvement.", "Hard", 20),
]

DAILY_QUESTIONS = [
    _question(1, "What is the most important principle in software development?",
              ["Speed", "Clarity and maintainability", "Using latest tech", "Minimal code"], 1,
              "Clear, maintainable code is essential for long-term success.", "Easy", 10),
    _question(2, "How do you approach a new programming problem?",
              ["Start coding immediately", "Understand the problem first", "Copy existing solutions",
               "Use trial and error"], 1,
              "Understanding the problem thoroughly is the first step to an effective solution.", "Easy", 10),
    _question(3, "What makes code 'clean'?",
              ["Short variable names", "No comments", "Self-explanatory and well-organized", "Complex algorithms"], 2,
              "Clean code is readable, well-organized, and self-explanatory.", "Medium", 15),
    _question(4, "Why is continuous learning important for developers?",
              ["Technology constantly evolves", "It's a requirement", "To show off knowledge", "To avoid work"], 0,
              "Technology evolves rapidly, making continuous learning essential for staying relevant.", "Medium", 15),
    _question(5, "What's the best way to handle complex problems?",
              ["Solve everything at once", "Break into smaller parts", "Avoid them", "Use random approaches"], 1,
              "Breaking complex problems into smaller, manageable parts is a fundamental problem-solving "
              "strategy.", "Hard", 20),
]


def fallback_assessment(domain: str, skill_level: str) -> dict:
    return {
        "assessment": {
            "id": f"assessment-{int(time.time() * 1000)}",
            "title": f"{domain} Fundamentals Assessment",
            "description": f"Test your knowledge of {domain} basics and core concepts.",
            "difficulty": skill_level,
            "totalQuestions": len(ASSESSMENT_QUESTIONS),
            "timeLimit": 30,
            "passingScore": 70,
        },
        "questions": copy.deepcopy(ASSESSMENT_QUESTIONS),
        "timeLimit": 1800,
    }


def fallback_daily_assessment() -> dict:
    return {
        "assessment": {
            "id": f"daily-assessment-{int(time.time() * 1000)}",
            "title": "Daily Knowledge Check",
            "description": "Quick review of key concepts",
            "difficulty": "Mixed",
            "totalQuestions": len(DAILY_QUESTIONS),
            "timeLimit": 10,
            "passingScore": 60,
        },
        "questions": copy.deepcopy(DAILY_QUESTIONS),
        "timeLimit": 600,
    }
