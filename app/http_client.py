import requests

# one pooled session for outbound calls (GitHub, Resend); per-service auth goes on each request
http_session = requests.Session()
