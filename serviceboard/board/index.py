"""Per-snapshot lookup tables for workflows, stages and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from serviceboard.logger import get_logger

from .types import ServiceCatalogItem, WorkflowDefinition, WorkflowStage

log = get_logger("INDEX")


@dataclass(frozen=True)
class SnapshotIndex:
    """
    Identifier lookups built once per snapshot.

    Duplicate ids keep their first occurrence and are logged; the
    derivation pipeline never raises on them.
    """

    workflows: dict[str, WorkflowDefinition] = field(default_factory=dict)
    services: dict[str, ServiceCatalogItem] = field(default_factory=dict)
    stages: dict[str, WorkflowStage] = field(default_factory=dict)
    stage_workflow: dict[str, str] = field(default_factory=dict)
    workflow_stages: dict[str, dict[str, WorkflowStage]] = field(default_factory=dict)
    workflow_order: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        workflows: Iterable[WorkflowDefinition],
        services: Iterable[ServiceCatalogItem],
    ) -> "SnapshotIndex":
        workflow_map: dict[str, WorkflowDefinition] = {}
        stage_map: dict[str, WorkflowStage] = {}
        stage_workflow: dict[str, str] = {}
        workflow_stages: dict[str, dict[str, WorkflowStage]] = {}

        for workflow in workflows:
            if workflow.id in workflow_map:
                log.warning("Duplicate workflow id ignored", workflow_id=workflow.id)
                continue
            workflow_map[workflow.id] = workflow
            own_stages = workflow_stages.setdefault(workflow.id, {})
            for stage in workflow.stages:
                own_stages.setdefault(stage.id, stage)
                if stage.id in stage_map:
                    log.warning(
                        "Stage id reused across workflows",
                        stage_id=stage.id,
                        workflow_id=workflow.id,
                        first_workflow_id=stage_workflow[stage.id],
                    )
                    continue
                stage_map[stage.id] = stage
                stage_workflow[stage.id] = workflow.id

        service_map: dict[str, ServiceCatalogItem] = {}
        for service in services:
            if service.id in service_map:
                log.warning("Duplicate service id ignored", service_id=service.id)
                continue
            service_map[service.id] = service

        return cls(
            workflows=workflow_map,
            services=service_map,
            stages=stage_map,
            stage_workflow=stage_workflow,
            workflow_stages=workflow_stages,
            workflow_order=tuple(workflow_map),
        )

    def workflow(self, workflow_id: str | None) -> WorkflowDefinition | None:
        if not workflow_id:
            return None
        return self.workflows.get(workflow_id)

    def service(self, service_id: str | None) -> ServiceCatalogItem | None:
        if not service_id:
            return None
        return self.services.get(service_id)

    def stage(self, stage_id: str | None) -> WorkflowStage | None:
        if not stage_id:
            return None
        return self.stages.get(stage_id)

    def stage_in_workflow(self, workflow_id: str | None, stage_id: str | None) -> WorkflowStage | None:
        """Return the stage only when it belongs to the given workflow."""
        if not workflow_id or not stage_id:
            return None
        return self.workflow_stages.get(workflow_id, {}).get(stage_id)
