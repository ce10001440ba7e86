"""Session controller for scripted technical interviews."""
from .interview_session import FALLBACK_MODE, InterviewSession, MissingPreconditionError

__all__ = ["FALLBACK_MODE", "InterviewSession", "MissingPreconditionError"]
