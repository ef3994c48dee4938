"""Core roadmap logic for spiral: IDs, roadmap, context, queries, commits."""
