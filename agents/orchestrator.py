# agents/orchestrator.py
"""
NutriPlan AI — Orchestrator (Profile Wizard)
============================================
Drives the Personal → Body → Lifestyle → Terms wizard, hands the finished
profile to the planner, and owns the two-phase reset flow.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, Optional

from agents.planner_agent import generate_diet_plan
from agents.schemas import GeneratedPlan, UserProfile
from memory.progress_log import ProgressLog

# =============================================================================
# STATES & TRANSITIONS
# =============================================================================
class WizardStep(IntEnum):
    PERSONAL = 1
    BODY = 2
    LIFESTYLE = 3
    TERMS = 4
    PROCESSING = 5
    RESULT = 6


class NavTab(str, Enum):
    HOME = "home"
    PLAN = "plan"
    CHAT = "chat"
    PROGRESS = "progress"


class WizardAction(str, Enum):
    NEXT = "next"
    PREV = "prev"
    SUBMIT = "submit"
    SUCCEED = "succeed"
    FAIL = "fail"


TRANSITIONS: Dict[tuple, WizardStep] = {
    (WizardStep.PERSONAL, WizardAction.NEXT): WizardStep.BODY,
    (WizardStep.BODY, WizardAction.NEXT): WizardStep.LIFESTYLE,
    (WizardStep.BODY, WizardAction.PREV): WizardStep.PERSONAL,
    (WizardStep.LIFESTYLE, WizardAction.NEXT): WizardStep.TERMS,
    (WizardStep.LIFESTYLE, WizardAction.PREV): WizardStep.BODY,
    (WizardStep.TERMS, WizardAction.PREV): WizardStep.LIFESTYLE,
    (WizardStep.TERMS, WizardAction.SUBMIT): WizardStep.PROCESSING,
    (WizardStep.PROCESSING, WizardAction.SUCCEED): WizardStep.RESULT,
    (WizardStep.PROCESSING, WizardAction.FAIL): WizardStep.TERMS,
}

INPUT_STEPS = 4

# =============================================================================
# MESSAGES
# =============================================================================
TERMS_REQUIRED_MESSAGE = "You need to accept the terms to continue."
PLAN_SUCCESS_MESSAGE = "Plan generated successfully!"
GENERATION_ERROR_BANNER = (
    "An error occurred while generating your plan. Check that the API key "
    "is configured correctly and try again."
)
GENERATION_ERROR_TOAST = "Error connecting to the AI."
FULL_RESET_MESSAGE = "Plan and progress history reset successfully."
FORM_RESET_MESSAGE = "Form cleared."
FULL_RESET_PROMPT = (
    "Are you sure? This will permanently delete your CURRENT plan and all "
    "PROGRESS history."
)
FORM_RESET_PROMPT = "Are you sure you want to clear all form fields?"

HELP_CONTENT = {
    WizardStep.PERSONAL: (
        "Fill in your basic details.\n\n"
        "**Name:** how you would like the app to call you.\n\n"
        "**Age/Gender:** used to estimate your basal metabolism."
    ),
    WizardStep.BODY: (
        "These numbers are essential to calculate your calorie needs.\n\n"
        "**Height:** in centimetres (e.g. 165).\n\n"
        "**Goal Weight:** a realistic target for your first plan."
    ),
    WizardStep.LIFESTYLE: (
        "Tune the plan to your real routine.\n\n"
        "**Activity Level:** be honest to avoid too much or too little energy.\n\n"
        "**Restrictions:** list allergies (e.g. peanuts) or preferences "
        "(e.g. vegetarian) so the AI can adapt the menu."
    ),
    WizardStep.TERMS: (
        "This app uses Artificial Intelligence to generate suggestions.\n\n"
        "It does not replace a doctor. By accepting you confirm you understand "
        "these are wellbeing suggestions only."
    ),
}
DEFAULT_HELP = "Fill in the requested data so our AI can build the best plan for you."


@dataclass
class Notification:
    """Transient toast."""
    message: str
    kind: str = "success"  # success | error | info


# =============================================================================
# WIZARD
# =============================================================================
class ProfileWizard:
    """Session state of the wizard, plan and reset flow."""

    def __init__(
        self,
        generate_plan: Callable[[UserProfile], GeneratedPlan] = generate_diet_plan,
        progress_log: Optional[ProgressLog] = None,
    ):
        self._generate_plan = generate_plan
        self.progress_log = progress_log

        self.step = WizardStep.PERSONAL
        self.profile = UserProfile()
        self.plan: Optional[GeneratedPlan] = None
        self.terms_accepted = False
        self.error: Optional[str] = None
        self.nav_tab = NavTab.HOME
        self.is_generating = False

        self.show_reset_confirm = False
        self.pending_reset_full = True
        self._reset_dialog_pending = False
        self.reset_key = 0
        self.scroll_to_top = False

        self.notification: Optional[Notification] = None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _notify(self, message: str, kind: str = "success") -> None:
        self.notification = Notification(message, kind)

    def pop_notification(self) -> Optional[Notification]:
        notification, self.notification = self.notification, None
        return notification

    def _apply(self, action: WizardAction) -> bool:
        target = TRANSITIONS.get((self.step, action))
        if target is None:
            return False
        self.step = target
        return True

    @property
    def progress_percent(self) -> float:
        return min(100.0, (self.step - 1) / INPUT_STEPS * 100)

    def help_content(self) -> str:
        return HELP_CONTENT.get(self.step, DEFAULT_HELP)

    # -------------------------------------------------------------------------
    # Form
    # -------------------------------------------------------------------------
    def update_field(self, field: str, value: Any) -> None:
        if field not in UserProfile.model_fields:
            raise ValueError(f"Unknown profile field: {field}")
        self.profile = UserProfile.model_validate({**self.profile.model_dump(), field: value})

    def next_step(self) -> bool:
        return self._apply(WizardAction.NEXT)

    def prev_step(self) -> bool:
        return self._apply(WizardAction.PREV)

    # -------------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------------
    def submit(self) -> Dict[str, Any]:
        """
        Generate the plan from the Terms step.

        Returns a status dict: "success", "error" (generation failed,
        retryable), "invalid" (terms not accepted) or "ignored" (wrong step
        or a request already in flight).
        """
        if self.is_generating or self.step != WizardStep.TERMS:
            return {"status": "ignored"}

        if not self.terms_accepted:
            self._notify(TERMS_REQUIRED_MESSAGE, "error")
            return {"status": "invalid", "message": TERMS_REQUIRED_MESSAGE}

        self._apply(WizardAction.SUBMIT)
        self.nav_tab = NavTab.HOME
        self.error = None
        self.is_generating = True
        try:
            plan = self._generate_plan(self.profile)
        except Exception as e:
            print(f"❌ Orchestrator: plan generation failed: {e}")
            self.error = GENERATION_ERROR_BANNER
            self._notify(GENERATION_ERROR_TOAST, "error")
            self._apply(WizardAction.FAIL)
            return {"status": "error", "message": GENERATION_ERROR_BANNER}
        finally:
            self.is_generating = False

        self.plan = plan
        self._apply(WizardAction.SUCCEED)
        self.nav_tab = NavTab.PLAN
        self._notify(PLAN_SUCCESS_MESSAGE, "success")
        return {"status": "success", "plan": plan}

    # -------------------------------------------------------------------------
    # Reset (request → confirm)
    # -------------------------------------------------------------------------
    def request_reset(self, full: bool = True) -> None:
        self.pending_reset_full = full
        self.show_reset_confirm = True
        self._reset_dialog_pending = True

    def cancel_reset(self) -> None:
        self.show_reset_confirm = False

    def open_reset_dialog(self) -> bool:
        """
        True once per reset request. If the dialog is still flagged on a
        later run it was dismissed without an answer, so it is cancelled.
        """
        if not self.show_reset_confirm:
            return False
        if self._reset_dialog_pending:
            self._reset_dialog_pending = False
            return True
        self.cancel_reset()
        return False

    @property
    def reset_prompt(self) -> str:
        return FULL_RESET_PROMPT if self.pending_reset_full else FORM_RESET_PROMPT

    def confirm_reset(self) -> bool:
        """Execute the pending reset. No-op unless one was requested."""
        if not self.show_reset_confirm:
            return False

        self.profile = UserProfile()
        self.plan = None
        self.terms_accepted = False
        self.error = None
        self.step = WizardStep.PERSONAL
        self.nav_tab = NavTab.HOME
        self.reset_key += 1
        self.show_reset_confirm = False
        self.scroll_to_top = True

        if self.pending_reset_full:
            if self.progress_log is not None:
                self.progress_log.clear()
            self._notify(FULL_RESET_MESSAGE, "info")
        else:
            self._notify(FORM_RESET_MESSAGE, "info")
        return True


__all__ = [
    "ProfileWizard",
    "WizardStep",
    "WizardAction",
    "NavTab",
    "Notification",
    "TRANSITIONS",
]
