"""
Structural helpers for BPMN 2.0 XML.

Only the document shape is inspected: a process with at least one start and
one end event. Elements are matched by local name, so both ``bpmn:``
prefixed and default-namespace documents are accepted.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Iterator

BLANK_DIAGRAM = """<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL"
                  xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI"
                  xmlns:dc="http://www.omg.org/spec/DD/20100524/DC"
                  xmlns:di="http://www.omg.org/spec/DD/20100524/DI"
                  id="Definitions_1"
                  targetNamespace="http://bpmn.io/schema/bpmn">
  <bpmn:process id="Process_1" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" name="Start">
      <bpmn:outgoing>Flow_1</bpmn:outgoing>
    </bpmn:startEvent>
    <bpmn:userTask id="UserTask_1" name="Review Application">
      <bpmn:incoming>Flow_1</bpmn:incoming>
      <bpmn:outgoing>Flow_2</bpmn:outgoing>
    </bpmn:userTask>
    <bpmn:endEvent id="EndEvent_1" name="End">
      <bpmn:incoming>Flow_2</bpmn:incoming>
    </bpmn:endEvent>
    <bpmn:sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="UserTask_1" />
    <bpmn:sequenceFlow id="Flow_2" sourceRef="UserTask_1" targetRef="EndEvent_1" />
  </bpmn:process>
  <bpmndi:BPMNDiagram id="BPMNDiagram_1">
    <bpmndi:BPMNPlane id="BPMNPlane_1" bpmnElement="Process_1">
      <bpmndi:BPMNShape id="StartEvent_1_di" bpmnElement="StartEvent_1">
        <dc:Bounds x="152" y="102" width="36" height="36" />
      </bpmndi:BPMNShape>
      <bpmndi:BPMNShape id="UserTask_1_di" bpmnElement="UserTask_1">
        <dc:Bounds x="240" y="80" width="100" height="80" />
      </bpmndi:BPMNShape>
      <bpmndi:BPMNShape id="EndEvent_1_di" bpmnElement="EndEvent_1">
        <dc:Bounds x="392" y="102" width="36" height="36" />
      </bpmndi:BPMNShape>
      <bpmndi:BPMNEdge id="Flow_1_di" bpmnElement="Flow_1">
        <di:waypoint x="188" y="120" />
        <di:waypoint x="240" y="120" />
      </bpmndi:BPMNEdge>
      <bpmndi:BPMNEdge id="Flow_2_di" bpmnElement="Flow_2">
        <di:waypoint x="340" y="120" />
        <di:waypoint x="392" y="120" />
      </bpmndi:BPMNEdge>
    </bpmndi:BPMNPlane>
  </bpmndi:BPMNDiagram>
</bpmn:definitions>
"""


def blank_diagram() -> str:
    return BLANK_DIAGRAM


def _local(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def _iter_local(root: ET.Element, local_name: str) -> Iterator[ET.Element]:
    for element in root.iter():
        if isinstance(element.tag, str) and _local(element.tag) == local_name:
            yield element


def _parse(xml: str) -> ET.Element | None:
    try:
        return ET.fromstring(xml.strip().encode("utf-8"))
    except ET.ParseError:
        return None


def validate_bpmn_xml(xml: str) -> tuple[bool, list[str]]:
    root = _parse(xml or "")
    if root is None:
        return False, ["Invalid XML format"]

    errors: list[str] = []
    if next(_iter_local(root, "process"), None) is None:
        errors.append("Missing process element")
    if next(_iter_local(root, "startEvent"), None) is None:
        errors.append("Process must have at least one start event")
    if next(_iter_local(root, "endEvent"), None) is None:
        errors.append("Process must have at least one end event")
    return not errors, errors


def _attribute(element: ET.Element, local_name: str) -> str | None:
    for key, value in element.attrib.items():
        if _local(key) == local_name:
            return value
    return None


def parse_bpmn_xml(xml: str) -> dict[str, Any] | None:
    """Process name and user tasks of a diagram, or None when it does not parse."""
    root = _parse(xml or "")
    if root is None:
        return None

    process = next(_iter_local(root, "process"), None)
    workflow_name = (process.get("name") if process is not None else None) or "Untitled Workflow"
    user_tasks = [
        {
            "id": task.get("id"),
            "name": task.get("name"),
            "assignee": _attribute(task, "assignee"),
        }
        for task in _iter_local(root, "userTask")
    ]
    return {"workflow_name": workflow_name, "user_tasks": user_tasks}
