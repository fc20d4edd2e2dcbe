"""Main entry point for the Novelist completion relay API."""
import logging
import tiktoken
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import PORT, LOG_LEVEL, LOG_FORMAT, CORS_ORIGINS, GROQ_API_KEY, TOKEN_ENCODING
from logger import setup_logging
from models.api import (
    VerifyAccessCodeRequest,
    VerifyAccessCodeResponse,
    GenerateRequest,
    GenerateResponse,
    ErrorResponse,
)
from services.completion_relay import CompletionRelay
from services.llm_client import LLMClient, LLMClientError

# Initialize logging
logger = logging.getLogger(__name__)

GENERATION_ERROR = "Error generating completion"

# Initialize FastAPI app
app = FastAPI(
    title="Novelist Completion Relay",
    description="Access-code gate and text-continuation relay for the Novelist editor",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
completion_relay: CompletionRelay = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global completion_relay

    logger.info("Initializing Novelist relay services...")

    llm_client = None
    if GROQ_API_KEY:
        llm_client = LLMClient()
        logger.info("Initialized LLMClient")
    else:
        logger.warning("GROQ_API_KEY is not set; /api/generate will fail until it is configured")

    try:
        token_encoder = tiktoken.get_encoding(TOKEN_ENCODING)
        logger.info(f"Initialized tiktoken encoder ({TOKEN_ENCODING})")
    except Exception as e:
        # Encoding files are fetched on first use; prompt sizes just go unlogged without them
        logger.warning(f"Could not load tiktoken encoding {TOKEN_ENCODING}: {e}")
        token_encoder = None

    completion_relay = CompletionRelay(llm_client=llm_client, token_encoder=token_encoder)
    logger.info("All services initialized successfully")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Novelist Completion Relay"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "novelist-relay",
        "version": "1.0.0"
    }


@app.post("/api/verify-access-code", response_model=VerifyAccessCodeResponse)
def verify_access_code_endpoint(request: VerifyAccessCodeRequest) -> VerifyAccessCodeResponse:
    """
    Check a submitted access code against the configured secret.

    Returns success=false for a wrong code and for a server without a
    configured secret alike.
    """
    success = completion_relay.verify_access_code(request.access_code)
    logger.info(f"Access code verification {'succeeded' if success else 'failed'}")
    return VerifyAccessCodeResponse(success=success)


@app.post(
    "/api/generate",
    response_model=GenerateResponse,
    responses={500: {"model": ErrorResponse}}
)
def generate_endpoint(request: GenerateRequest):
    """
    Generate a continuation of the story context.

    Args:
        request: GenerateRequest with story metadata, context and optional word count

    Returns:
        GenerateResponse with the trimmed continuation, or a 500 ErrorResponse
    """
    try:
        result = completion_relay.generate(
            protagonist=request.protagonist,
            outline=request.outline,
            author=request.author,
            story_context=request.story_context,
            word_count=request.word_count
        )
    except LLMClientError as e:
        logger.error(f"LLM client error: {e.error.code}: {e.error.message}")
        return JSONResponse(status_code=500, content=ErrorResponse(error=GENERATION_ERROR).model_dump())
    except Exception as e:
        logger.error(f"Unexpected error generating completion: {e}", exc_info=True)
        return JSONResponse(status_code=500, content=ErrorResponse(error=GENERATION_ERROR).model_dump())

    return GenerateResponse(generated_text=result.text)


if __name__ == "__main__":
    import uvicorn
    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL)
    logger.info(f"Starting Novelist relay on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
