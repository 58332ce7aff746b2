"""API route handlers."""

from .qcs import router as qcs_router
from .matches import router as matches_router
