"""
SHACL-Markup Web API

FastAPI-based REST API around a single ShaclValidator.
Provides endpoints for:
- Service info and health
- Validating a document
"""

from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from shacl_markup import __version__
from shacl_markup.config import ValidatorConfig
from shacl_markup.errors import FormatDetectionError, ShapeLookupError
from shacl_markup.graph import graph_to_records
from shacl_markup.report import unique_by
from shacl_markup.validator import ShaclValidator

UNIQUE_KEYS = ("property", "service", "severity")


class ValidateRequest(BaseModel):
    """Document validation request."""
    data: str = Field(..., description="JSON-LD, or HTML with Microdata or RDFa")
    unique: bool = Field(default=False, description="Drop failures repeating property, service and severity")


class ValidateResponse(BaseModel):
    """Document validation response."""
    baseUrl: str
    format: Optional[str] = None
    quadCount: int
    failures: list[dict[str, Any]]
    triples: list[dict[str, str]]


def create_app(validator: Optional[ShaclValidator] = None) -> FastAPI:
    """
    Create the FastAPI application.
    
    Args:
        validator: Validator to serve; when omitted, one is built from the
            YAML file named by SHACL_MARKUP_CONFIG
        
    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="SHACL-Markup API",
        description="SHACL validation of JSON-LD, Microdata and RDFa markup",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    
    app.state.validator = validator or ShaclValidator.from_config(ValidatorConfig.from_env())
    
    @app.get("/", tags=["Info"])
    async def root():
        """API root with basic info."""
        return {
            "name": "SHACL-Markup",
            "version": __version__,
            "formats": ["json-ld", "microdata", "rdfa"],
            "docs": "/docs",
        }
    
    @app.get("/health", tags=["Info"])
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}
    
    @app.post("/validate", tags=["Validation"], response_model=ValidateResponse)
    async def validate(request: ValidateRequest):
        """Validate a document against the configured shapes."""
        try:
            outcome = await app.state.validator.validate(request.data)
        except FormatDetectionError as e:
            raise HTTPException(400, str(e))
        except ShapeLookupError as e:
            raise HTTPException(500, str(e))
        
        result = outcome.to_dict()
        if request.unique:
            result["failures"] = unique_by(result["failures"], UNIQUE_KEYS)
        result["triples"] = graph_to_records(outcome.quads)
        return result
    
    return app
