"""Server entrypoint: `uvicorn jobtracker.main:app`. Builds the app from the environment on import."""

from dotenv import load_dotenv

load_dotenv()

from jobtracker.application import create_app

app = create_app()
