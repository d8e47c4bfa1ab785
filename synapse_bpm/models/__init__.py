"""
SQLAlchemy models for the Synapse BPMN designer.

Entities reference each other by integer id only; there are no foreign-key
constraints or cascades between tables.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Workflow(Base):
    __tablename__ = "workflows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    bpmn_xml = Column(Text, nullable=False)
    version = Column(Text, nullable=False, default="1.0.0")
    status = Column(Text, nullable=False, default="draft")
    created_by = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class WorkflowVersion(Base):
    __tablename__ = "workflow_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workflow_id = Column(Integer, nullable=False, index=True)
    version = Column(Text, nullable=False)
    bpmn_xml = Column(Text, nullable=False)
    change_log = Column(Text)
    status = Column(Text, nullable=False, default="draft")
    created_by = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class WorkflowInstance(Base):
    __tablename__ = "workflow_instances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workflow_id = Column(Integer, nullable=False, index=True)
    status = Column(Text, nullable=False)
    current_step = Column(Text)
    variables = Column(JSON, default=dict)
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workflow_instance_id = Column(Integer, nullable=False, index=True)
    task_definition_key = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text)
    assignee = Column(Text, index=True)
    status = Column(Text, nullable=False)
    priority = Column(Text, nullable=False, default="medium")
    due_date = Column(DateTime)
    form_data = Column(JSON, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime)


class ApiIntegration(Base):
    __tablename__ = "api_integrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    base_url = Column(Text, nullable=False)
    auth_type = Column(Text, nullable=False, default="none")
    auth_config = Column(JSON, default=dict)
    headers = Column(JSON, default=dict)
    timeout = Column(Integer, default=30000)
    retry_attempts = Column(Integer, default=3)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class ApiCall(Base):
    __tablename__ = "api_calls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workflow_instance_id = Column(Integer, index=True)
    task_id = Column(Integer)
    integration_id = Column(Integer, nullable=False, index=True)
    method = Column(Text, nullable=False)
    endpoint = Column(Text, nullable=False)
    request_headers = Column(JSON, default=dict)
    request_body = Column(JSON)
    response_status = Column(Integer)
    response_headers = Column(JSON)
    response_body = Column(JSON)
    error_message = Column(Text)
    duration = Column(Integer)
    attempts = Column(Integer, default=1)
    status = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime)


class DeploymentPipeline(Base):
    __tablename__ = "deployment_pipelines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workflow_id = Column(Integer, nullable=False, index=True)
    version = Column(Text, nullable=False)
    environment = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    deployed_by = Column(Text)
    deployment_logs = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime)


class ActivityEvent(Base):
    __tablename__ = "activity_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
