# flake8: noqa E501
DASHBOARD_ANALYSIS_PROMPT = "This spreadsheet contains dashboard KPIs. Please analyze the key trends and provide a short 3–4 bullet point summary."

KPI_PREDICTION_PROMPT = """
You are an expert KPI prediction assistant. Two files are attached:
- One is the current month’s KPI for the {department} department.
- The other contains last year’s trends for the same department.

Your job:
1. Calculate each KPI’s current value from raw data.
2. Compare it with the same KPI from the same month last year.
3. Use BSC targets to determine: Prediction = Meet | Not Meet
4. Explain the prediction based on trends and targets.

Output format:
KPI: <name>
Current Value: <value>
Last Year (Same Month): <value>
Target: <target>
Prediction: Meet | Not Meet
Reason: <reason>
"""


def render_kpi_prompt(department: str) -> str:
    return KPI_PREDICTION_PROMPT.format(department=department).strip()

CHAT_OPENER_FOLLOW_UP = "If you have any more questions, feel free to ask me 🙂"


def render_chat_opener(summary: str) -> str:
    return f"{summary}\n\n{CHAT_OPENER_FOLLOW_UP}"
