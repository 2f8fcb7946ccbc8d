"""Service layer — export and import orchestration.

Services take a :class:`~entryport.workspace.Workspace` and return
:class:`~entryport.services.result.ServiceResult` for record-level outcomes.
"""
