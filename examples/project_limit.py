"""
project_limit.py

Pattern: Tier-Based
Decision: Project Limit

Map a user's plan to a project quota. Profiles are registered by name so
each deployment region can carry its own limits.

Run with: python -m examples.project_limit
"""

from typing import Literal

from pydantic import BaseModel, Field

from criterion import Engine, ProfileRegistry, RunOptions, create_rule, define_decision

Plan = Literal["free", "starter", "pro", "enterprise"]

UNLIMITED = -1


class ProjectRequest(BaseModel):
    user_plan: Plan
    current_project_count: int = Field(ge=0)


class PlanLimits(BaseModel):
    free: int
    starter: int
    pro: int
    enterprise: int  # UNLIMITED for no cap


class LimitProfile(BaseModel):
    limits: PlanLimits


class ProjectQuota(BaseModel):
    allowed: bool
    reason: str
    max_allowed: int
    remaining: int


def _limit(req: ProjectRequest, profile: LimitProfile) -> int:
    return getattr(profile.limits, req.user_plan)


project_limit = define_decision(
    id="project-limit",
    version="1.0.0",
    input_schema=ProjectRequest,
    output_schema=ProjectQuota,
    profile_schema=LimitProfile,
    rules=[
        create_rule(
            id="enterprise-unlimited",
            when=lambda req, p: req.user_plan == "enterprise" and p.limits.enterprise == UNLIMITED,
            emit=lambda req, p: {
                "allowed": True,
                "reason": "Enterprise plan has unlimited projects",
                "max_allowed": UNLIMITED,
                "remaining": UNLIMITED,
            },
            explain=lambda req, p: (
                f"User on enterprise plan with {req.current_project_count} projects (unlimited)"
            ),
        ),
        create_rule(
            id="within-limit",
            when=lambda req, p: req.current_project_count < _limit(req, p),
            emit=lambda req, p: {
                "allowed": True,
                "reason": f"Can create project ({req.current_project_count + 1}/{_limit(req, p)})",
                "max_allowed": _limit(req, p),
                "remaining": _limit(req, p) - req.current_project_count - 1,
            },
            explain=lambda req, p: (
                f"{req.current_project_count}/{_limit(req, p)} projects used on {req.user_plan} plan"
            ),
        ),
        create_rule(
            id="at-limit",
            when=lambda req, p: True,
            emit=lambda req, p: {
                "allowed": False,
                "reason": f"Reached {_limit(req, p)} project limit on {req.user_plan} plan",
                "max_allowed": _limit(req, p),
                "remaining": 0,
            },
            explain=lambda req, p: (
                f"{req.current_project_count}/{_limit(req, p)} projects - "
                f"limit reached on {req.user_plan} plan"
            ),
        ),
    ],
)


def build_registry() -> ProfileRegistry:
    registry = ProfileRegistry()
    registry.register("default", {"limits": {"free": 3, "starter": 10, "pro": 50, "enterprise": UNLIMITED}})
    registry.register("eu", {"limits": {"free": 2, "starter": 10, "pro": 40, "enterprise": 500}})
    return registry


def main() -> None:
    engine = Engine()
    registry = build_registry()
    for profile_id, request in (
        ("default", {"user_plan": "free", "current_project_count": 1}),
        ("default", {"user_plan": "free", "current_project_count": 3}),
        ("default", {"user_plan": "enterprise", "current_project_count": 900}),
        ("eu", {"user_plan": "enterprise", "current_project_count": 500}),
    ):
        result = engine.run(project_limit, request, RunOptions(profile=profile_id), registry)
        print(engine.explain(result))
        print()


if __name__ == "__main__":
    main()
