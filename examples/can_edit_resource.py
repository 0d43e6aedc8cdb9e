"""
can_edit_resource.py

Pattern: Boolean Gate
Decision: Can Edit Resource

Blockers first, then special cases, then role grants, then default deny.

Run with: python -m examples.can_edit_resource
"""

from typing import Literal

from pydantic import BaseModel

from criterion import Engine, RunOptions, create_rule, define_decision


class EditRequest(BaseModel):
    user_id: str
    resource_id: str
    user_role: Literal["admin", "editor", "viewer"]
    is_owner: bool
    resource_locked: bool


class EditPolicy(BaseModel):
    allow_edit_locked: bool


class EditPermission(BaseModel):
    allowed: bool
    reason: str


can_edit_resource = define_decision(
    id="can-edit-resource",
    version="1.0.0",
    input_schema=EditRequest,
    output_schema=EditPermission,
    profile_schema=EditPolicy,
    rules=[
        create_rule(
            id="locked-blocked",
            when=lambda r, p: r.resource_locked and not p.allow_edit_locked,
            emit=lambda r, p: {
                "allowed": False,
                "reason": "Resource is locked and editing locked resources is disabled",
            },
            explain=lambda r, p: "Resource is locked and profile does not allow editing locked resources",
        ),
        create_rule(
            id="owner-allowed",
            when=lambda r, p: r.is_owner,
            emit=lambda r, p: {"allowed": True, "reason": "Resource owner can always edit"},
            explain=lambda r, p: f"User {r.user_id} is the resource owner",
        ),
        create_rule(
            id="admin-allowed",
            when=lambda r, p: r.user_role == "admin",
            emit=lambda r, p: {"allowed": True, "reason": "Admins can edit all resources"},
            explain=lambda r, p: f"User {r.user_id} has admin role",
        ),
        create_rule(
            id="editor-allowed",
            when=lambda r, p: r.user_role == "editor",
            emit=lambda r, p: {"allowed": True, "reason": "Editors can edit resources"},
            explain=lambda r, p: f"User {r.user_id} has editor role",
        ),
        create_rule(
            id="viewer-denied",
            when=lambda r, p: True,
            emit=lambda r, p: {"allowed": False, "reason": f"Role '{r.user_role}' cannot edit resources"},
            explain=lambda r, p: f"User {r.user_id} has {r.user_role} role without edit rights",
        ),
    ],
)


def main() -> None:
    engine = Engine()
    options = RunOptions(profile={"allow_edit_locked": False})
    base = {"resource_id": "doc-1", "is_owner": False, "resource_locked": False}
    for request in (
        {**base, "user_id": "u1", "user_role": "viewer", "is_owner": True},
        {**base, "user_id": "u2", "user_role": "admin", "resource_locked": True},
        {**base, "user_id": "u3", "user_role": "editor"},
        {**base, "user_id": "u4", "user_role": "viewer"},
    ):
        result = engine.run(can_edit_resource, request, options)
        print(engine.explain(result))
        print()


if __name__ == "__main__":
    main()
