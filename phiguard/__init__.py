"""PHIGuard — PHI detection service for healthcare compliance tooling."""
