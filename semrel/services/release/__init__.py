"""Release pipeline: commit analysis, notes, hooks and publishing.

Entry point is ``semrel.services.release.pipeline.ReleaseOrchestrator``.
"""
