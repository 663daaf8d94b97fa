# ui/streamlit_app.py
"""
NutriPlan AI — Streamlit App
============================
Profile wizard, weekly plan view with PDF export, AI nutritionist chat
and a local progress tracker.
"""

import sys
from dataclasses import dataclass
from pathlib import Path

import streamlit as st
import streamlit.components.v1 as components

# ========================================
# PATH SETUP
# ========================================
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from agents.coach_agent import ChatAssistant
from agents.orchestrator import NavTab, ProfileWizard, WizardStep
from agents.schemas import ActivityLevel, Gender, GeneratedPlan, Goal
from memory.local_store import LocalStore
from memory.progress_log import ProgressLog
from tools.chat_formatter import to_markdown
from tools.image_compressor import ImageProcessingError, data_url_to_bytes
from tools.plan_export import PDF_FILENAME, render_plan_pdf
from ui.cards import calorie_badge_html, meal_card_html, text_card_html

# ========================================
# CONFIGURATION
# ========================================
STEP_TITLES = {
    WizardStep.PERSONAL: "👤 About You",
    WizardStep.BODY: "⚖️ Body Measurements",
    WizardStep.LIFESTYLE: "🏃 Lifestyle",
    WizardStep.TERMS: "🛡️ Terms of Responsibility",
}

NAV_LABELS = {
    NavTab.HOME: "🏠 Home",
    NavTab.PLAN: "📄 My Plan",
    NavTab.CHAT: "✨ AI",
    NavTab.PROGRESS: "📈 Progress",
}

TOAST_ICONS = {"success": "✅", "error": "❌", "info": "ℹ️"}

PHOTO_LABELS = {"front": "Front", "back": "Back", "side": "Side"}

TERMS_POINTS = [
    "You are responsible for following this protocol.",
    "Results can be noticeably positive in a short time.",
    "This AI-generated protocol **does not replace** follow-up by a doctor or nutritionist.",
    "Any change to your diet should be supervised by a health professional.",
]


@dataclass
class AppConfig:
    """Application configuration."""
    page_title: str = "NutriPlan AI — Your Weekly Nutrition Plan"
    page_icon: str = "🥗"
    layout: str = "centered"


# ========================================
# PAGE SETUP
# ========================================
st.set_page_config(
    page_title=AppConfig.page_title,
    page_icon=AppConfig.page_icon,
    layout=AppConfig.layout,
)


# ========================================
# STYLING
# ========================================
def load_styles():
    """Load custom CSS styles."""
    st.markdown("""
    <style>
        .stButton>button {
            border-radius: 10px;
            font-weight: 600;
        }
        .plan-card {
            background: #FFFFFF;
            border: 1px solid #E2E8F0;
            border-radius: 14px;
            padding: 1rem 1.2rem;
            margin-bottom: 0.8rem;
        }
        .plan-card h4 { margin: 0 0 0.4rem 0; color: #7E22CE; }
        .kcal-badge {
            background: #FFEDD5;
            color: #C2410C;
            border-radius: 999px;
            padding: 0.2rem 0.7rem;
            font-weight: 700;
        }
    </style>
    """, unsafe_allow_html=True)


# ========================================
# SESSION STATE
# ========================================
def init_session_state():
    """Create the per-session wizard, progress log and chat slots."""
    if "wizard" not in st.session_state:
        progress_log = ProgressLog(LocalStore())
        st.session_state.wizard = ProfileWizard(progress_log=progress_log)
    defaults = {
        "assistant": None,
        "pdf_cache": {},
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def get_wizard() -> ProfileWizard:
    return st.session_state.wizard


# ========================================
# UI COMPONENTS
# ========================================
class UIComponents:
    """Reusable UI components."""

    @staticmethod
    def html(snippet: str) -> None:
        st.markdown(snippet, unsafe_allow_html=True)

    @staticmethod
    def card(title: str, text: str) -> None:
        UIComponents.html(text_card_html(title, text))

    @staticmethod
    def show_notification(wizard: ProfileWizard) -> None:
        notification = wizard.pop_notification()
        if notification:
            st.toast(notification.message, icon=TOAST_ICONS.get(notification.kind, "ℹ️"))

    @staticmethod
    def scroll_to_top(wizard: ProfileWizard) -> None:
        if wizard.scroll_to_top:
            components.html("<script>window.parent.scrollTo(0, 0);</script>", height=0)
            wizard.scroll_to_top = False


@st.dialog("Confirmation")
def reset_dialog():
    """Interstitial confirmation before any destructive reset."""
    wizard = get_wizard()
    st.write(wizard.reset_prompt)
    col_cancel, col_confirm = st.columns(2)
    if col_cancel.button("Cancel", use_container_width=True):
        wizard.cancel_reset()
        st.rerun()
    confirm_label = "Yes, Reset" if wizard.pending_reset_full else "Clear"
    if col_confirm.button(confirm_label, type="primary", use_container_width=True):
        wizard.confirm_reset()
        st.session_state.assistant = None
        st.session_state.pdf_cache = {}
        st.rerun()


# ========================================
# WIZARD
# ========================================
class WizardSection:
    """Four-step profile form."""

    @staticmethod
    def render(wizard: ProfileWizard) -> None:
        k = wizard.reset_key
        col_title, col_help, col_reset = st.columns([6, 1, 1])
        with col_title:
            st.title("🥗 NutriPlan AI")
        with col_help:
            with st.popover("❔"):
                st.markdown("**How to use**")
                st.markdown(wizard.help_content())
        with col_reset:
            if wizard.step > WizardStep.PERSONAL:
                if st.button("🔄", help="Clear form", key=f"clear_{k}"):
                    wizard.request_reset(full=False)
                    st.rerun()

        st.progress(int(wizard.progress_percent))

        if wizard.error:
            st.error(wizard.error, icon="🛡️")

        st.subheader(STEP_TITLES[wizard.step])

        if wizard.step == WizardStep.PERSONAL:
            WizardSection._render_personal(wizard, k)
        elif wizard.step == WizardStep.BODY:
            WizardSection._render_body(wizard, k)
        elif wizard.step == WizardStep.LIFESTYLE:
            WizardSection._render_lifestyle(wizard, k)
        elif wizard.step == WizardStep.TERMS:
            WizardSection._render_terms(wizard, k)

        WizardSection._render_navigation(wizard, k)

    @staticmethod
    def _render_personal(wizard: ProfileWizard, k: int) -> None:
        profile = wizard.profile
        name = st.text_input("Name or Nickname", value=profile.name,
                             placeholder="Your name", key=f"name_{k}")
        col_age, col_gender = st.columns(2)
        age = col_age.number_input("Age", min_value=0, max_value=130,
                                   value=profile.age, step=1, key=f"age_{k}")
        genders = list(Gender)
        gender = col_gender.selectbox("Gender", genders, index=genders.index(profile.gender),
                                      format_func=lambda g: g.value, key=f"gender_{k}")
        wizard.update_field("name", name)
        wizard.update_field("age", int(age))
        wizard.update_field("gender", gender)

    @staticmethod
    def _render_body(wizard: ProfileWizard, k: int) -> None:
        profile = wizard.profile
        height = st.number_input("📏 Height (cm)", min_value=0.0, max_value=260.0,
                                 value=float(profile.height), key=f"height_{k}")
        col_current, col_goal = st.columns(2)
        current = col_current.number_input("Current Weight (kg)", min_value=0.0, max_value=400.0,
                                           value=float(profile.current_weight), key=f"current_{k}")
        goal = col_goal.number_input("Goal Weight (kg)", min_value=0.0, max_value=400.0,
                                     value=float(profile.goal_weight), key=f"goal_weight_{k}")
        wizard.update_field("height", height)
        wizard.update_field("current_weight", current)
        wizard.update_field("goal_weight", goal)

    @staticmethod
    def _render_lifestyle(wizard: ProfileWizard, k: int) -> None:
        profile = wizard.profile
        levels = list(ActivityLevel)
        activity = st.selectbox("Activity Level", levels,
                                index=levels.index(profile.activity_level),
                                format_func=lambda a: a.value, key=f"activity_{k}")
        goals = list(Goal)
        goal = st.selectbox("Main Goal", goals, index=goals.index(profile.goal),
                            format_func=lambda g: g.value, key=f"goal_{k}")
        restrictions = st.text_area(
            "Dietary Restrictions (Optional)", value=profile.dietary_restrictions, height=80,
            placeholder="e.g. gluten free, vegetarian, peanut allergy...", key=f"restrictions_{k}",
        )
        water = st.text_input("Daily Water Intake Preference", value=profile.water_intake,
                              key=f"water_{k}")
        wizard.update_field("activity_level", activity)
        wizard.update_field("goal", goal)
        wizard.update_field("dietary_restrictions", restrictions)
        wizard.update_field("water_intake", water)

    @staticmethod
    def _render_terms(wizard: ProfileWizard, k: int) -> None:
        st.warning(
            "**Please read carefully before continuing:**\n\n"
            + "\n".join(f"- {point}" for point in TERMS_POINTS)
        )
        wizard.terms_accepted = st.checkbox(
            "I have read, understood and accept that I am responsible for using this "
            "protocol and that I should seek professional guidance.",
            value=wizard.terms_accepted, key=f"terms_{k}",
        )

    @staticmethod
    def _render_navigation(wizard: ProfileWizard, k: int) -> None:
        col_back, col_next = st.columns([1, 2])
        with col_back:
            if wizard.step > WizardStep.PERSONAL:
                if st.button("◀ Back", use_container_width=True, key=f"back_{k}"):
                    wizard.prev_step()
                    st.rerun()
        with col_next:
            if wizard.step == WizardStep.TERMS:
                if st.button("Generate Plan", type="primary", use_container_width=True,
                             disabled=wizard.is_generating, key=f"submit_{k}"):
                    with st.spinner("Analysing your profile... our AI is building a "
                                    "personalised nutrition plan."):
                        wizard.submit()
                    st.rerun()
            elif st.button("Next ▶", type="primary", use_container_width=True, key=f"next_{k}"):
                wizard.next_step()
                st.rerun()


# ========================================
# PLAN VIEW
# ========================================
class PlanTab:
    """Generated plan with day selector and PDF export."""

    @staticmethod
    def render(plan: GeneratedPlan, reset_key: int) -> None:
        col_title, col_pdf = st.columns([3, 2])
        with col_title:
            st.markdown("## 📄 Your Weekly Plan")
        with col_pdf:
            st.download_button(
                "⬇️ Download PDF",
                data=PlanTab._pdf_bytes(plan),
                file_name=PDF_FILENAME,
                mime="application/pdf",
                use_container_width=True,
            )

        st.info(plan.summary)
        col_strategy, col_tips = st.columns(2)
        with col_strategy:
            UIComponents.card("🥗 Nutritional Strategy", plan.nutritional_strategy)
        with col_tips:
            UIComponents.card("💡 Wellbeing Tips", plan.side_effect_management)

        PlanTab._render_day(plan, reset_key)

    @staticmethod
    def _pdf_bytes(plan: GeneratedPlan) -> bytes:
        cache = st.session_state.pdf_cache
        if id(plan) not in cache:
            cache.clear()
            cache[id(plan)] = render_plan_pdf(plan, compress=True)
        return cache[id(plan)]

    @staticmethod
    def _render_day(plan: GeneratedPlan, reset_key: int) -> None:
        labels = [d.day for d in plan.daily_plans]
        index = st.radio("Day", range(len(labels)), format_func=lambda i: labels[i],
                         horizontal=True, label_visibility="collapsed",
                         key=f"day_{reset_key}")
        day = plan.daily_plans[index]

        col_theme, col_kcal = st.columns([3, 1])
        with col_theme:
            st.markdown(f"### {day.day}")
            st.caption(f"{day.theme} · 💧 {day.hydration_tip[:30]}...")
        with col_kcal:
            UIComponents.html(calorie_badge_html(day.total_calories))

        for label, meal in day.meals():
            UIComponents.html(meal_card_html(label, meal))

        col_water, col_move = st.columns(2)
        with col_water:
            UIComponents.card("💧 Hydration", day.hydration_tip)
        with col_move:
            UIComponents.card("🏃 Exercise", day.exercise_suggestion)


# ========================================
# CHAT
# ========================================
class ChatTab:
    """Chat with the AI nutritionist."""

    @staticmethod
    def _get_assistant(plan: GeneratedPlan) -> ChatAssistant:
        assistant = st.session_state.assistant
        if assistant is None or assistant.plan is not plan:
            assistant = ChatAssistant(plan)
            st.session_state.assistant = assistant
        return assistant

    @staticmethod
    def render(plan: GeneratedPlan) -> None:
        st.markdown("## ✨ AI Specialist")
        st.caption("Ask questions about your protocol")

        assistant = ChatTab._get_assistant(plan)
        if not assistant.is_available:
            st.warning("GOOGLE_API_KEY is not configured; the assistant cannot answer.")

        for message in assistant.messages:
            with st.chat_message(message.role):
                st.markdown(to_markdown(message.text))

        if prompt := st.chat_input("Type your question...", disabled=assistant.is_loading):
            with st.chat_message("user"):
                st.markdown(to_markdown(prompt))
            with st.spinner("Thinking..."):
                assistant.send(prompt)
            st.rerun()


# ========================================
# PROGRESS
# ========================================
class ProgressTab:
    """Weight and photo check-ins."""

    @staticmethod
    def render(progress_log: ProgressLog, reset_key: int) -> None:
        st.markdown("## 📈 Your Progress")
        progress_log.load()

        ProgressTab._render_form(progress_log, reset_key)
        ProgressTab._render_chart(progress_log)
        ProgressTab._render_history(progress_log)

    @staticmethod
    def _render_form(progress_log: ProgressLog, reset_key: int) -> None:
        with st.form(f"progress_form_{reset_key}", clear_on_submit=True):
            st.markdown("#### New Record")
            weight = st.number_input("⚖️ Current Weight (kg)", min_value=0.0,
                                     max_value=400.0, value=None, step=0.1)
            st.caption("Progress photos (optional)")
            uploads = {}
            for column, (slot, label) in zip(st.columns(3), PHOTO_LABELS.items()):
                with column:
                    uploads[slot] = st.file_uploader(label, type=["png", "jpg", "jpeg", "webp"],
                                                     key=f"photo_{slot}_{reset_key}")
            notes = st.text_input("Notes (optional)")
            submitted = st.form_submit_button("Save Record", type="primary",
                                              use_container_width=True)

        if not submitted:
            return

        photos = {slot: f.getvalue() for slot, f in uploads.items() if f is not None}
        with st.spinner("Compressing images..."):
            result = progress_log.record(weight, photos=photos, notes=notes)

        if result["status"] == "error":
            if result.get("blocking"):
                st.error(result["message"], icon="🚫")
            else:
                st.warning(result["message"])
            return

        for slot, message in result["photo_errors"].items():
            st.error(f"{PHOTO_LABELS[slot]}: {message}")
        if result["warning"]:
            st.warning(result["warning"])
        st.success(f"Record saved: {result['entry'].weight:g} kg")

    @staticmethod
    def _render_chart(progress_log: ProgressLog) -> None:
        st.markdown("#### Weight Evolution")
        fig = progress_log.build_weight_chart()
        if fig is None:
            st.info("Add at least two records to see your weight chart.")
        else:
            st.plotly_chart(fig, use_container_width=True)

    @staticmethod
    def _render_history(progress_log: ProgressLog) -> None:
        st.markdown("#### History")
        entries = progress_log.history()
        if not entries:
            st.caption("No records yet.")
            return

        for entry in entries:
            with st.container(border=True):
                col_date, col_weight = st.columns([1, 1])
                col_date.markdown(f"**{entry.date}**")
                col_weight.markdown(f"**{entry.weight:g} kg**")
                if entry.notes:
                    st.caption(entry.notes)
                attached = entry.photos.attached() if entry.photos else []
                if attached:
                    cols = st.columns(len(attached))
                    for col, (slot, url) in zip(cols, attached):
                        try:
                            col.image(data_url_to_bytes(url), caption=PHOTO_LABELS[slot], width=90)
                        except ImageProcessingError as e:
                            print(f"⚠️ Skipping unreadable photo in entry {entry.id}: {e}")


# ========================================
# PLAN SHELL
# ========================================
class PlanShell:
    """Header, tab navigation and the active tab once a plan exists."""

    @staticmethod
    def render(wizard: ProfileWizard) -> None:
        col_logo, col_reset = st.columns([3, 1])
        with col_logo:
            st.title("🥗 NutriPlan AI")
        with col_reset:
            if st.button("🔄 Reset Plan", use_container_width=True):
                wizard.request_reset(full=True)
                st.rerun()

        tabs = list(NavTab)
        selected = st.radio(
            "Navigation", tabs, index=tabs.index(wizard.nav_tab),
            format_func=lambda t: NAV_LABELS[t], horizontal=True,
            label_visibility="collapsed", key=f"nav_{wizard.reset_key}",
        )
        wizard.nav_tab = selected

        if selected == NavTab.CHAT:
            ChatTab.render(wizard.plan)
        elif selected == NavTab.PROGRESS:
            ProgressTab.render(wizard.progress_log, wizard.reset_key)
        else:
            PlanTab.render(wizard.plan, wizard.reset_key)


def main():
    """Main application entry point."""
    load_styles()
    init_session_state()
    wizard = get_wizard()

    UIComponents.show_notification(wizard)
    UIComponents.scroll_to_top(wizard)

    if wizard.open_reset_dialog():
        reset_dialog()

    if wizard.plan is not None:
        PlanShell.render(wizard)
    else:
        WizardSection.render(wizard)

    st.caption("NutriPlan AI suggestions do not replace professional medical advice.")


if __name__ == "__main__":
    main()
