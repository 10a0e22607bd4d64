"""AWS Lambda entry point — Mangum ASGI adapter for the FastAPI app."""

from mangum import Mangum

from ratemygit.main import app

# No lifespan on Lambda: startup only logs provider configuration
handler = Mangum(app, lifespan="off")
