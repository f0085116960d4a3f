"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Note, Template and derived views)
- task_store.py: SQLite-backed storage + query/update helpers
- duration.py: elapsed-time aggregation and humanization
- hierarchy.py: parent/child tree reconstruction for indented printing
- review.py: grouping of recently updated notes under their task
- errors.py: error taxonomy shared by the store and the CLI
"""
