"""
PDF export of a diet plan, rendered with reportlab's platypus layout engine.
"""

import io
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from domain.enums import DAYS_OF_WEEK, STORAGE_MEAL_ORDER
from services.csv_service import format_number

ACCENT = colors.HexColor("#4CAF50")
MUTED = colors.HexColor("#666666")
PANEL = colors.HexColor("#f8f9fa")


def format_long_date(value: datetime) -> str:
    """e.g. 'January 1, 2024'"""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="PlanTitle", parent=styles["Title"], textColor=ACCENT, fontSize=24, leading=28))
    styles.add(ParagraphStyle(name="PlanSubtitle", parent=styles["Normal"], alignment=1, textColor=MUTED, fontSize=12))
    styles.add(ParagraphStyle(name="Section", parent=styles["Heading2"], textColor=ACCENT))
    styles.add(ParagraphStyle(name="DayHeader", parent=styles["Heading2"], textColor=colors.white, spaceBefore=0, spaceAfter=0))
    styles.add(ParagraphStyle(name="MealType", parent=styles["Normal"], textColor=MUTED, fontName="Helvetica-Bold", fontSize=9))
    styles.add(ParagraphStyle(name="MealName", parent=styles["Heading3"], spaceBefore=2, spaceAfter=2))
    styles.add(ParagraphStyle(name="MealDescription", parent=styles["Italic"], textColor=MUTED))
    styles.add(ParagraphStyle(name="Cell", parent=styles["Normal"], fontSize=10, leading=13))
    return styles


def _text(value) -> str:
    return escape(str(value))


def _personal_information(user: dict, styles) -> list:
    rows = [
        ["Name:", user.get("name") or ""],
        ["Email:", user.get("email") or ""],
    ]
    if user.get("age"):
        rows.append(["Age:", f"{format_number(user['age'])} years"])
    if user.get("weight"):
        rows.append(["Weight:", f"{format_number(user['weight'])} kg"])
    if user.get("height"):
        rows.append(["Height:", f"{format_number(user['height'])} cm"])
    if user.get("goal"):
        rows.append(["Goal:", user["goal"].replace("_", " ", 1)])

    table = Table(
        [[Paragraph(f"<b>{_text(label)}</b>", styles["Cell"]), Paragraph(_text(value), styles["Cell"])] for label, value in rows],
        colWidths=[1.2 * inch, 5.0 * inch],
    )
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), PANEL),
                ("LINEBEFORE", (0, 0), (0, -1), 3, ACCENT),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return [Paragraph("Personal Information", styles["Section"]), table, Spacer(1, 12)]


def _plan_overview(payload: dict, styles) -> list:
    story = [
        Paragraph("Plan Overview", styles["Section"]),
        Paragraph(
            f"<b>Duration:</b> {format_long_date(payload['week_start'])} - {format_long_date(payload['week_end'])}",
            styles["Normal"],
        ),
    ]
    if payload.get("description"):
        story += [Spacer(1, 6), Paragraph(_text(payload["description"]), styles["Normal"])]
    story.append(Spacer(1, 12))
    return story


def _nutrition_table(meal: dict, styles):
    items = [
        ("Calories", meal.get("calories"), ""),
        ("Protein", meal.get("protein"), "g"),
        ("Carbs", meal.get("carbs"), "g"),
        ("Fat", meal.get("fat"), "g"),
        ("Fiber", meal.get("fiber"), "g"),
    ]
    items = [(label, value, unit) for label, value, unit in items if value]
    if not items:
        return None

    table = Table(
        [
            [f"{format_number(value)}{unit}" for _, value, unit in items],
            [label.upper() for label, _, _ in items],
        ]
    )
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), PANEL),
                ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("TEXTCOLOR", (0, 0), (-1, 0), ACCENT),
                ("FONTSIZE", (0, 1), (-1, 1), 7),
                ("TEXTCOLOR", (0, 1), (-1, 1), MUTED),
            ]
        )
    )
    return table


def _meal_block(meal: dict, styles) -> KeepTogether:
    flowables = [
        Paragraph(_text(meal["mealType"]), styles["MealType"]),
        Paragraph(_text(meal.get("name") or ""), styles["MealName"]),
    ]
    if meal.get("description"):
        flowables.append(Paragraph(_text(meal["description"]), styles["MealDescription"]))

    nutrition = _nutrition_table(meal, styles)
    if nutrition is not None:
        flowables += [Spacer(1, 4), nutrition]

    ingredients = meal.get("ingredients") or []
    if ingredients:
        flowables += [
            Spacer(1, 4),
            Paragraph("<b>Ingredients:</b>", styles["Cell"]),
            Paragraph(_text(", ".join(ingredients)), styles["Cell"]),
        ]

    if meal.get("instructions"):
        flowables += [
            Spacer(1, 4),
            Paragraph("<b>Instructions:</b>", styles["Cell"]),
            Paragraph(_text(meal["instructions"]), styles["Cell"]),
        ]
        timing = []
        if meal.get("prepTime"):
            timing.append(f"Prep: {format_number(meal['prepTime'])} min")
        if meal.get("cookTime"):
            timing.append(f"Cook: {format_number(meal['cookTime'])} min")
        if meal.get("servings"):
            timing.append(f"Serves: {format_number(meal['servings'])}")
        if timing:
            flowables.append(Paragraph(_text("   ".join(timing)), styles["MealType"]))

    flowables.append(Spacer(1, 10))
    return KeepTogether(flowables)


def _day_section(day, meals: list, styles) -> list:
    header = Table([[Paragraph(day.value.lower().capitalize(), styles["DayHeader"])]], colWidths=[6.5 * inch])
    header.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), ACCENT),
                ("LEFTPADDING", (0, 0), (-1, -1), 12),
                ("TOPPADDING", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return [header, Spacer(1, 8)] + [_meal_block(meal, styles) for meal in meals] + [Spacer(1, 12)]


def generate_diet_plan_pdf(payload: dict) -> bytes:
    """
    Render an exported plan as a PDF document.

    Days appear in calendar order; within a day meals appear as breakfast,
    lunch, dinner, then snack. Days without meals are still given a header.
    """
    styles = _styles()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=payload["name"],
    )

    story = [
        Paragraph(_text(payload["name"]), styles["PlanTitle"]),
        Paragraph("Personalized Diet Plan", styles["PlanSubtitle"]),
        Spacer(1, 18),
    ]
    story += _personal_information(payload.get("user") or {}, styles)
    story += _plan_overview(payload, styles)

    meals = payload.get("meals") or []
    for day in DAYS_OF_WEEK:
        day_meals = []
        for meal_type in STORAGE_MEAL_ORDER:
            day_meals += [m for m in meals if m.get("day") == day.value and m.get("mealType") == meal_type.value][:1]
        story += _day_section(day, day_meals, styles)

    story += [
        Spacer(1, 18),
        Paragraph(f"Generated on {format_long_date(datetime.now())}", styles["PlanSubtitle"]),
        Paragraph("Diet Planner App - Your Personal Nutrition Assistant", styles["PlanSubtitle"]),
    ]
    doc.build(story)
    return buffer.getvalue()
