from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from synapse_bpm.models import ApiIntegration, Task, Workflow, WorkflowInstance
from synapse_bpm.services.activity_service import record_activity

INVOICE_APPROVAL_XML = """<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL"
                  xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI"
                  xmlns:dc="http://www.omg.org/spec/DD/20100524/DC"
                  xmlns:di="http://www.omg.org/spec/DD/20100524/DI"
                  id="Definitions_1"
                  targetNamespace="http://bpmn.io/schema/bpmn">
  <bpmn:process id="InvoiceApproval" name="Invoice Approval Process" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" name="Invoice received">
      <bpmn:outgoing>Flow_1</bpmn:outgoing>
    </bpmn:startEvent>
    <bpmn:userTask id="ReviewInvoice" name="Review Invoice" assignee="john.doe">
      <bpmn:incoming>Flow_1</bpmn:incoming>
      <bpmn:outgoing>Flow_2</bpmn:outgoing>
    </bpmn:userTask>
    <bpmn:userTask id="ApprovePayment" name="Approve Payment" assignee="jane.smith">
      <bpmn:incoming>Flow_2</bpmn:incoming>
      <bpmn:outgoing>Flow_3</bpmn:outgoing>
    </bpmn:userTask>
    <bpmn:endEvent id="EndEvent_1" name="Invoice paid">
      <bpmn:incoming>Flow_3</bpmn:incoming>
    </bpmn:endEvent>
    <bpmn:sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="ReviewInvoice" />
    <bpmn:sequenceFlow id="Flow_2" sourceRef="ReviewInvoice" targetRef="ApprovePayment" />
    <bpmn:sequenceFlow id="Flow_3" sourceRef="ApprovePayment" targetRef="EndEvent_1" />
  </bpmn:process>
</bpmn:definitions>
"""

SAMPLE_INTEGRATIONS: list[dict[str, Any]] = [
    {
        "name": "Customer API",
        "base_url": "https://api.example.com",
        "auth_type": "bearer",
        "auth_config": {"token": "your-api-token"},
        "headers": {"Content-Type": "application/json"},
        "timeout": 30000,
        "retry_attempts": 3,
    },
    {
        "name": "Payment Gateway",
        "base_url": "https://payments.example.com",
        "auth_type": "api_key",
        "auth_config": {"key": "your-api-key", "header": "X-API-Key"},
        "headers": {"Content-Type": "application/json"},
        "timeout": 15000,
        "retry_attempts": 2,
    },
]


def seed_sample_data(db: Session) -> int:
    """Insert the demo workflow, its tasks and sample integrations into an empty store."""
    if db.query(Workflow).count() > 0:
        return 0

    inserted = 0
    workflow = Workflow(
        name="Invoice Approval Process",
        description="Standard process for approving invoices",
        bpmn_xml=INVOICE_APPROVAL_XML,
        version="1.0.0",
        status="active",
        created_by="system",
    )
    db.add(workflow)
    db.flush()
    inserted += 1

    instance = WorkflowInstance(
        workflow_id=workflow.id,
        status="running",
        current_step="ReviewInvoice",
        variables={"invoiceId": "INV-001", "amount": 1500},
    )
    db.add(instance)
    db.flush()
    inserted += 1

    now = datetime.utcnow()
    for key, name, assignee, priority, due in (
        ("ReviewInvoice", "Review Invoice #INV-001", "john.doe", "high", now + timedelta(days=1)),
        ("ApprovePayment", "Approve Payment #INV-001", "jane.smith", "medium", now + timedelta(days=3)),
    ):
        db.add(
            Task(
                workflow_instance_id=instance.id,
                task_definition_key=key,
                name=name,
                assignee=assignee,
                status="pending",
                priority=priority,
                due_date=due,
                form_data={},
            )
        )
        inserted += 1

    for item in SAMPLE_INTEGRATIONS:
        if db.query(ApiIntegration).filter(ApiIntegration.name == item["name"]).first() is None:
            db.add(ApiIntegration(**item))
            inserted += 1

    record_activity(db, "workflow_deployed", f"{workflow.name} deployed")
    record_activity(db, "task_assigned", "Review Invoice #INV-001 assigned to john.doe")
    db.commit()
    return inserted
