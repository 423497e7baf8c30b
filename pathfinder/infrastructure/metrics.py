from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Cache
cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

# Text generation
ai_requests_total = Counter(
    'ai_requests_total',
    'Text generation attempts',
    ['kind', 'outcome']
)
ai_fallbacks_total = Counter(
    'ai_fallbacks_total',
    'Responses served from static fallback content',
    ['kind']
)

# Certificates
certificates_issued_total = Counter('certificates_issued_total', 'Total certificates issued')
certificate_renders_total = Counter(
    'certificate_renders_total',
    'Certificate image renders',
    ['outcome']
)

def metrics_endpoint():
    """Prometheus scrape endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
