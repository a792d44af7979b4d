from .orchestrator import (
    BatchOrchestrator,
    BatchResult,
    Failure,
    GenerationOutcome,
    Skip,
    Success,
    generate_alt_text,
    validate_image_url,
)

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "Failure",
    "GenerationOutcome",
    "Skip",
    "Success",
    "generate_alt_text",
    "validate_image_url",
]
