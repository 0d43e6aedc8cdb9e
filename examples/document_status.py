"""
document_status.py

Pattern: State Machine
Decision: Document Status Change

Validate a requested status transition against the allowed transitions and
the permissions of the requesting role.

Run with: python -m examples.document_status
"""

from typing import Dict, List, Literal

from pydantic import BaseModel

from criterion import Engine, RunOptions, define_decision

Status = Literal["draft", "review", "approved", "published", "archived"]
Role = Literal["author", "reviewer", "admin"]


class StatusChange(BaseModel):
    document_id: str
    current_status: Status
    requested_status: Status
    user_role: Role


class WorkflowProfile(BaseModel):
    transitions: Dict[str, List[str]]
    role_permissions: Dict[str, List[str]]


class TransitionOutcome(BaseModel):
    allowed: bool
    reason: str
    valid_next_states: List[str]


def _next_states(profile: WorkflowProfile, status: str) -> List[str]:
    return list(profile.transitions.get(status, []))


def _transition_key(change: StatusChange) -> str:
    return f"{change.current_status}->{change.requested_status}"


document_status = define_decision(
    id="document-status-change",
    version="1.0.0",
    input_schema=StatusChange,
    output_schema=TransitionOutcome,
    profile_schema=WorkflowProfile,
    rules=[
        {
            "id": "same-status",
            "when": lambda c, p: c.current_status == c.requested_status,
            "emit": lambda c, p: {
                "allowed": True,
                "reason": f"Document already in {c.current_status} status",
                "valid_next_states": _next_states(p, c.current_status),
            },
            "explain": lambda c, p: f"No transition needed, document already in {c.current_status} status",
        },
        {
            "id": "invalid-transition",
            "when": lambda c, p: c.requested_status not in _next_states(p, c.current_status),
            "emit": lambda c, p: {
                "allowed": False,
                "reason": f"Cannot move from {c.current_status} to {c.requested_status}",
                "valid_next_states": _next_states(p, c.current_status),
            },
            "explain": lambda c, p: (
                f"Invalid transition: {_transition_key(c)}. "
                f"Valid transitions: {', '.join(_next_states(p, c.current_status)) or 'none'}"
            ),
        },
        {
            "id": "role-not-permitted",
            "when": lambda c, p: _transition_key(c) not in p.role_permissions.get(c.user_role, []),
            "emit": lambda c, p: {
                "allowed": False,
                "reason": f"Role '{c.user_role}' cannot perform this transition",
                "valid_next_states": _next_states(p, c.current_status),
            },
            "explain": lambda c, p: (
                f"Role {c.user_role} is not permitted to transition "
                f"from {c.current_status} to {c.requested_status}"
            ),
        },
        {
            "id": "transition-allowed",
            "when": lambda c, p: True,
            "emit": lambda c, p: {
                "allowed": True,
                "reason": f"Transition {_transition_key(c)} approved",
                "valid_next_states": _next_states(p, c.requested_status),
            },
            "explain": lambda c, p: (
                f"{c.user_role} approved to transition document "
                f"from {c.current_status} to {c.requested_status}"
            ),
        },
    ],
)

WORKFLOW = {
    "transitions": {
        "draft": ["review"],
        "review": ["draft", "approved"],
        "approved": ["published", "review"],
        "published": ["archived"],
        "archived": [],
    },
    "role_permissions": {
        "author": ["draft->review"],
        "reviewer": ["review->draft", "review->approved"],
        "admin": [
            "draft->review",
            "review->draft",
            "review->approved",
            "approved->published",
            "approved->review",
            "published->archived",
        ],
    },
}


def main() -> None:
    engine = Engine()
    options = RunOptions(profile=WORKFLOW)
    for change in (
        {"document_id": "doc1", "current_status": "draft", "requested_status": "review", "user_role": "author"},
        {"document_id": "doc2", "current_status": "draft", "requested_status": "published", "user_role": "author"},
        {"document_id": "doc3", "current_status": "review", "requested_status": "approved", "user_role": "author"},
        {"document_id": "doc4", "current_status": "approved", "requested_status": "published", "user_role": "admin"},
    ):
        result = engine.run(document_status, change, options)
        print(engine.explain(result))
        print()


if __name__ == "__main__":
    main()
