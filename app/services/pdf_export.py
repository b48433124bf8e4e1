"""PDF rendering of a user's data export."""

import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.core.timeutils import utc_now


class UserDataPDF:
    """Lays out the export sections: account, statistics, documents, quizzes, achievements."""

    def __init__(self, page_size=A4, margins=None):
        self.page_size = page_size
        self.margins = margins or {"top": 2 * cm, "bottom": 2 * cm, "left": 2 * cm, "right": 2 * cm}
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name="ExportTitle",
            parent=self.styles["Heading1"],
            fontSize=22,
            textColor=colors.darkblue,
            spaceAfter=20,
            alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            name="ExportHeading",
            parent=self.styles["Heading2"],
            fontSize=15,
            textColor=colors.darkblue,
            spaceBefore=16,
            spaceAfter=8,
        ))
        self.styles.add(ParagraphStyle(
            name="ExportNormal",
            parent=self.styles["Normal"],
            fontSize=10,
            spaceAfter=4,
        ))
        self.styles.add(ParagraphStyle(
            name="ExportFooter",
            parent=self.styles["Normal"],
            fontSize=8,
            textColor=colors.grey,
            spaceBefore=24,
        ))

    def _paragraph(self, text, style="ExportNormal") -> Paragraph:
        return Paragraph(escape(str(text)), self.styles[style])

    def _table(self, headers: list[str], rows: list[list]) -> Table:
        table = Table([headers] + [[str(cell) for cell in row] for row in rows], repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.darkblue),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f4f8")]),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table

    def _summary(self, data: dict) -> list[str]:
        documents = data["documents"]
        quizzes = data["quizResults"]
        sessions = data["readingSessions"]
        average = sum(q["score"] for q in quizzes) / len(quizzes) if quizzes else 0
        minutes = sum(s["totalMinutes"] or 0 for s in sessions)
        return [
            f"Total documents: {len(documents)}",
            f"Total words: {sum(d['wordCount'] for d in documents):,}",
            f"Reading sessions: {len(sessions)} ({minutes:.0f} minutes)",
            f"Quizzes taken: {len(quizzes)}",
            f"Average quiz score: {average:.1f}%",
        ]

    def render(self, data: dict) -> bytes:
        """Build the PDF for ``collect_user_data`` output and return its bytes."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            topMargin=self.margins["top"],
            bottomMargin=self.margins["bottom"],
            leftMargin=self.margins["left"],
            rightMargin=self.margins["right"],
            title="ChapterFlux Data Export",
            author="ChapterFlux",
        )

        user = data["user"]
        story = [self._paragraph("ChapterFlux Data Export", "ExportTitle")]

        story.append(self._paragraph("Account Information", "ExportHeading"))
        for line in (
            f"Name: {user['fullName']}",
            f"Email: {user['email']}",
            f"Member since: {(user['createdAt'] or '')[:10]}",
        ):
            story.append(self._paragraph(line))

        story.append(self._paragraph("Reading Statistics", "ExportHeading"))
        for line in self._summary(data):
            story.append(self._paragraph(line))

        if data["documents"]:
            story.append(self._paragraph("Your Documents", "ExportHeading"))
            story.append(self._table(
                ["Title", "Type", "Words", "Progress", "Added"],
                [
                    [d["title"], d["type"], d["wordCount"], f"{d['progress']:.0f}%", (d["createdAt"] or "")[:10]]
                    for d in data["documents"]
                ],
            ))

        if data["quizResults"]:
            titles = {d["id"]: d["title"] for d in data["documents"]}
            story.append(self._paragraph("Quiz Results", "ExportHeading"))
            story.append(self._table(
                ["Document", "Score", "Correct", "Difficulty", "Date"],
                [
                    [
                        titles.get(q["documentId"], "Deleted document"),
                        f"{q['score']:.0f}%",
                        f"{q['correctAnswers']}/{q['totalQuestions']}",
                        q["difficulty"],
                        (q["createdAt"] or "")[:10],
                    ]
                    for q in data["quizResults"]
                ],
            ))

        if data["achievements"]:
            story.append(self._paragraph("Achievements", "ExportHeading"))
            story.append(self._table(
                ["Achievement", "Unlocked"],
                [[a["type"].replace("_", " ").title(), (a["unlockedAt"] or "")[:10]] for a in data["achievements"]],
            ))

        story.append(Spacer(1, 12))
        story.append(self._paragraph(
            f"This data export was generated by ChapterFlux on {utc_now().date().isoformat()}.",
            "ExportFooter",
        ))

        doc.build(story)
        return buffer.getvalue()
