"""
Configuration for Orchestration Core
"""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for Orchestration Core"""

    # Mode: "solo" (local JSON templates) or "prod" (Supabase templates)
    MODE: str = os.getenv("ORCHESTRATOR_MODE", "solo")

    # Storage configuration
    STORAGE_PATH: Optional[str] = os.getenv("ORCHESTRATOR_STORAGE_PATH")
    if STORAGE_PATH is None:
        STORAGE_PATH = str(Path.home() / ".orchestrator" / "data")

    # Supabase configuration (for prod mode)
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
    SUPABASE_KEY: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # Gemini configuration (API_KEY kept as an alias for older setups)
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    GEMINI_API_BASE: str = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    IMAGEN_MODEL: str = os.getenv("IMAGEN_MODEL", "imagen-3.0-generate-002")

    # Timeout for outbound HTTP calls made by node effects (seconds)
    HTTP_TIMEOUT: float = float(os.getenv("ORCHESTRATOR_HTTP_TIMEOUT", "120"))

    # Smallest interval a scheduler node may be started with (seconds)
    MIN_SCHEDULER_INTERVAL: float = float(os.getenv("ORCHESTRATOR_MIN_SCHEDULER_INTERVAL", "1"))

    # API server configuration
    API_HOST: str = os.getenv("ORCHESTRATOR_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("ORCHESTRATOR_PORT", "7790"))

    # Debug mode (set ORCHESTRATOR_DEBUG=true to enable)
    DEBUG: bool = os.getenv("ORCHESTRATOR_DEBUG", "").lower() in ("true", "1", "yes")

    # Run-wide instructions prepended to every AI call
    AI_SUPERVISOR_INSTRUCTION: str = os.getenv(
        "ORCHESTRATOR_AI_SUPERVISOR_INSTRUCTION",
        "You are an AI Supervisor. Your primary role is to ensure that all AI-generated content is "
        "accurate, helpful, and adheres to the highest standards of quality. Review and refine outputs "
        "to be concise, relevant, and directly address the user's request. Add a touch of creativity "
        "and insight where appropriate, but always prioritize factual correctness and clarity."
    )
    SYSTEM_ORCHESTRATOR_INSTRUCTION: str = os.getenv(
        "ORCHESTRATOR_SYSTEM_INSTRUCTION",
        "You are the System Orchestrator. Your function is to process chained requests logically and "
        "efficiently. When receiving inputs from previous steps, synthesize them intelligently. Ensure "
        "the final output is a coherent and well-structured response that reflects the entire workflow, "
        "not just the final step. Maintain context and consistency throughout the process."
    )

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration"""
        if cls.MODE == "prod":
            if not cls.SUPABASE_URL or not cls.SUPABASE_KEY:
                print("[CONFIG] Error: SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required for prod mode")
                return False
        return True

    @classmethod
    def get_storage(cls):
        """Get template store instance based on mode"""
        from ..storage import LocalJSONTemplateStore, SupabaseTemplateStore

        if cls.MODE == "prod":
            if not cls.SUPABASE_URL or not cls.SUPABASE_KEY:
                raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required for prod mode")
            return SupabaseTemplateStore(cls.SUPABASE_URL, cls.SUPABASE_KEY)
        return LocalJSONTemplateStore(cls.STORAGE_PATH)
