"""Resume screening workflow.

The screening schema forces the producer through an explicit checklist:
per-criterion screening steps with evidence, skills, experience and
education breakdowns, then a fit score and a recommended action. The
recommended action selects the follow-up operation.
"""

import logging

from schemaguard.config.settings import SchemaGuardConfig
from schemaguard.core.constraints import (
    ObjectConstraint,
    array,
    boolean,
    integer,
    number,
    obj,
    optional,
    string,
)
from schemaguard.core.decision import Case, DecisionTable
from schemaguard.core.dispatch import Dispatcher
from schemaguard.core.pipeline import ActionPipeline
from schemaguard.core.registry import Operation, OperationRegistry, build_registry
from schemaguard.workflows.store import RecordStore

logger = logging.getLogger(__name__)


def resume_screening_schema(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    fit_min, fit_max = config.score_range("fit_score")

    screening_step = obj({
        "step_number": integer(minimum=1, description="Sequential step number in the screening process"),
        "evaluation_category": config.enum(
            "evaluation_categories", "The specific category being evaluated in this step"
        ),
        "requirement_met": boolean("Whether the candidate meets the requirement for this category"),
        "evidence": string(
            min_length=config.limit("min_evidence_length"),
            description="Specific evidence from the resume supporting this conclusion",
        ),
        "gap_identified": optional(string(description="If requirement not met, what gap was identified")),
    })

    extracted_skill = obj({
        "skill_name": string(min_length=config.limit("min_skill_name_length"), description="Name of the skill"),
        "proficiency_level": config.enum("proficiency_levels", "Estimated proficiency"),
        "years_experience": optional(number(minimum=0)),
        "evidence_source": string(description="Where in the resume this skill was demonstrated"),
    })

    skills_analysis = obj({
        "technical_skills": array(extracted_skill),
        "soft_skills": array(string(min_length=1)),
        "certifications": array(string()),
        "required_skills_matched": array(string()),
        "missing_required_skills": array(string()),
    }, description="Comprehensive breakdown of candidate skills")

    work_experience = obj({
        "company": string(),
        "role": string(),
        "duration_months": integer(minimum=0),
        "relevance": config.enum("relevance_types"),
        "key_achievements": array(string()),
        "skills_demonstrated": array(string()),
    })

    experience_analysis = obj({
        "total_years": number(minimum=0),
        "relevant_years": number(minimum=0),
        "experience_level": config.enum("experience_levels"),
        "career_progression": config.enum("career_progressions"),
        "work_history": array(work_experience),
    }, description="Analysis of work experience")

    education_entry = obj({
        "institution": string(),
        "degree": string(),
        "field_of_study": string(),
        "graduation_year": optional(integer()),
        "relevance": config.enum("relevance_types"),
    })

    education_analysis = obj({
        "highest_degree": config.enum("degree_types"),
        "education_history": array(education_entry),
        "meets_education_requirement": boolean(),
    }, description="Analysis of educational background")

    return obj({
        "candidate_id": string(min_length=1, description="Unique identifier for the candidate"),
        "job_id": string(min_length=1, description="Unique identifier for the job posting"),
        "overall_fit": config.enum("candidate_fit", "Overall assessment of candidate fit for the role"),
        "screening_steps": array(
            screening_step,
            min_items=config.limit("min_screening_steps"),
            description="Mandatory screening steps, each evaluating a different criterion",
        ),
        "skills_analysis": skills_analysis,
        "experience_analysis": experience_analysis,
        "education_analysis": education_analysis,
        "fit_score": number(fit_min, fit_max, description="Candidate fit score"),
        "strengths": array(
            string(min_length=1),
            min_items=config.limit("min_strengths"),
            description="Key strengths of the candidate",
        ),
        "concerns": array(string(), description="Potential concerns or gaps to address"),
        "recommended_action": config.enum(
            "recommended_actions", "Recommended next action for this candidate"
        ),
        "interview_focus_areas": array(
            string(), description="Areas to explore if the candidate advances to interview"
        ),
    })


def _candidate_ref() -> dict:
    return {
        "candidate_id": string(min_length=1),
        "job_id": string(min_length=1),
    }


def schedule_interview_args(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    return obj({
        **_candidate_ref(),
        "interview_type": config.enum("interview_types"),
        "priority": config.enum("priority_levels"),
        "focus_areas": array(string(min_length=1)),
    })


def send_candidate_email_args(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    return obj({
        **_candidate_ref(),
        "email_type": config.enum("email_types"),
        "notes": optional(string(max_length=500)),
    })


def flag_for_review_args(config: SchemaGuardConfig | None = None) -> ObjectConstraint:
    config = config or SchemaGuardConfig.from_dict()
    return obj({
        **_candidate_ref(),
        "reason": config.enum("flag_reasons"),
        "details": string(min_length=1),
    })


def screening_operations(store: RecordStore, config: SchemaGuardConfig | None = None) -> list[Operation]:
    """Operations whose executors write to ``store``"""

    def schedule_interview(args: dict) -> bool:
        logger.info("Scheduling %s interview for %s", args["interview_type"], args["candidate_id"])
        store.write("interviews", args)
        return True

    def send_candidate_email(args: dict) -> bool:
        logger.info("Queueing %s email for %s", args["email_type"], args["candidate_id"])
        store.write("emails", args)
        return True

    def flag_for_review(args: dict) -> bool:
        logger.info("Flagging %s for review: %s", args["candidate_id"], args["reason"])
        store.write("flags", args)
        return True

    return [
        Operation("schedule_interview", schedule_interview_args(config), schedule_interview,
                  "Schedule an interview with the candidate"),
        Operation("send_candidate_email", send_candidate_email_args(config), send_candidate_email,
                  "Send a templated email to the candidate"),
        Operation("flag_for_review", flag_for_review_args(config), flag_for_review,
                  "Flag the application for manual review"),
    ]


def build_screening_registry(store: RecordStore, config: SchemaGuardConfig | None = None) -> OperationRegistry:
    return build_registry(screening_operations(store, config))


def _ids(screening: dict) -> dict:
    return {"candidate_id": screening["candidate_id"], "job_id": screening["job_id"]}


def _interview(interview_type: str, strong_match: float):
    def build(screening: dict) -> dict:
        return {
            **_ids(screening),
            "interview_type": interview_type,
            "priority": "high" if screening["fit_score"] >= strong_match else "medium",
            "focus_areas": [a for a in screening["interview_focus_areas"] if a],
        }
    return build


def _email(email_type: str):
    def build(screening: dict) -> dict:
        return {**_ids(screening), "email_type": email_type}
    return build


def _flag(reason: str):
    def build(screening: dict) -> dict:
        details = "; ".join(c for c in screening.get("concerns", []) if c)
        return {**_ids(screening), "reason": reason, "details": details or "Held for manual review"}
    return build


def screening_decision(config: SchemaGuardConfig | None = None) -> DecisionTable:
    """Decision table on ``recommended_action``"""
    config = config or SchemaGuardConfig.from_dict()
    strong_match = config.get("scoring")["fit_thresholds"]["strong_match"]
    return DecisionTable(
        driver=("recommended_action",),
        cases={
            "advance_to_interview": Case("schedule_interview", _interview("technical", strong_match)),
            "phone_screen_first": Case("schedule_interview", _interview("phone_screen", strong_match)),
            "hold_for_review": Case("flag_for_review", _flag("edge_case")),
            "reject": Case("send_candidate_email", _email("rejection")),
        },
        default=Case("flag_for_review", _flag("incomplete_information")),
        name="screening",
    )


def screening_pipeline(store: RecordStore, config: SchemaGuardConfig | None = None) -> ActionPipeline:
    config = config or SchemaGuardConfig.from_dict()
    return ActionPipeline(
        resume_screening_schema(config),
        screening_decision(config),
        Dispatcher(build_screening_registry(store, config)),
        max_value_length=config.max_value_length,
    )
