"""FastAPI application for the conversation player"""
import logging
from typing import Optional
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
load_dotenv()

from config import Settings, settings as default_settings
from api.routes import player
from core.conversation.integration import PlayerAdapter
from core.conversation.interfaces import AnswerEvaluator, InteractionProvider
from core.conversation.pipeline import Scheduler

# Setup logging
logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def create_app(provider: InteractionProvider, evaluator: AnswerEvaluator,
               scheduler: Optional[Scheduler] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the player application for one learner session.

    Args:
        provider: Exploration content source
        evaluator: Answer grading collaborator
        scheduler: Timer source (defaults to the server's event loop)
        settings: Configuration (defaults to the environment)
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Conversation Player API",
        version="1.0.0",
        description="Card-by-card conversational exploration player",
        debug=settings.DEBUG
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.player = PlayerAdapter(provider, evaluator, scheduler=scheduler, settings=settings)
    app.include_router(player.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "environment": settings.ENVIRONMENT}

    logger.info(f"Conversation player created ({settings.ENVIRONMENT})")
    return app
