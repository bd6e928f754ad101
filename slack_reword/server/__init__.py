"""HTTP server package: the FastAPI app that receives Slack webhooks.

RULES:
- create_app() is the only composition root
- Served by uvicorn via run_api() or ``slack-reword serve``
"""
