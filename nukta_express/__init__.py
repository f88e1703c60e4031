"""nukta-express: Express.js + TypeScript project scaffolder."""

__version__ = "1.0.0"
