"""
Services for the note generator.

This module contains specialized services that handle specific aspects
around the pipeline, keeping the workflow orchestrator focused.
"""

from .workflow_display_manager import WorkflowDisplayManager
from .workflow_data_manager import WorkflowDataManager
from .topic_collection_service import TopicCollectionService
from .template_service import apply_template

__all__ = [
    "WorkflowDisplayManager",
    "WorkflowDataManager",
    "TopicCollectionService",
    "apply_template",
]
