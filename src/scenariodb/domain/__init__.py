"""Domain layer — key codec, error taxonomy, and entity graph models.

Pure Python with no database dependencies.
"""
