"""
DOCX rendering of an exam paper.

Right-to-left layout is decided per paragraph from its own text, while the
section direction and the default option alphabet follow the exam as a
whole (see script.is_arabic_exam).
"""

from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, List

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Twips

from .script import contains_arabic, is_arabic_exam, option_label

# right edge of the text area on a default page
TAB_STOP_MAX = Twips(9026)
HEADER_SPACING_AFTER = Twips(400)
QUESTION_SPACING_AFTER = Twips(200)
OPTION_SPACING_AFTER = Twips(120)
OPTION_INDENT = Twips(720)

# schema order of <w:pPr> children that may follow the ones added here
_PPR_AFTER_PBDR = (
    "w:shd", "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN",
    "w:bidi", "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
    "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap",
    "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange",
)
_PPR_AFTER_BIDI = _PPR_AFTER_PBDR[_PPR_AFTER_PBDR.index("w:bidi") + 1:]
_SECTPR_AFTER_BIDI = ("w:rtlGutter", "w:docGrid", "w:printerSettings", "w:sectPrChange")


@dataclass
class ExamData:
    quiz: Dict
    instructor: str
    subject: str
    questions: List[Dict] = field(default_factory=list)

    def fragments(self) -> List[str]:
        """Every text fragment that counts towards the exam's script"""
        texts = [self.subject or "", self.instructor or ""]
        for q in self.questions:
            texts.append(q.get("question_text") or "")
            texts.extend(o.get("option_text") or "" for o in q.get("options", []))
        return texts


# ==================== OXML HELPERS ====================

def _set_bidi(paragraph) -> None:
    pPr = paragraph._p.get_or_add_pPr()
    if pPr.find(qn("w:bidi")) is None:
        pPr.insert_element_before(OxmlElement("w:bidi"), *_PPR_AFTER_BIDI)


def _set_bottom_border(paragraph) -> None:
    pPr = paragraph._p.get_or_add_pPr()
    border = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), "auto")
    border.append(bottom)
    pPr.insert_element_before(border, *_PPR_AFTER_PBDR)


def _set_section_bidi(section) -> None:
    sectPr = section._sectPr
    if sectPr.find(qn("w:bidi")) is None:
        sectPr.insert_element_before(OxmlElement("w:bidi"), *_SECTPR_AFTER_BIDI)


def _orient(paragraph, rtl: bool) -> None:
    if rtl:
        _set_bidi(paragraph)
        paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    else:
        paragraph.alignment = WD_ALIGN_PARAGRAPH.LEFT


# ==================== DOCUMENT ASSEMBLY ====================

def build_exam_document(exam: ExamData):
    doc = Document()
    arabic_exam = is_arabic_exam(exam.fragments())

    # Header: subject on the left, instructor and duration against the right tab stop
    header = doc.add_paragraph()
    header.paragraph_format.tab_stops.add_tab_stop(TAB_STOP_MAX, WD_TAB_ALIGNMENT.RIGHT)
    header.paragraph_format.space_after = HEADER_SPACING_AFTER
    header.add_run(f"Subject: {exam.subject}").bold = True
    header.add_run(f"\tInstructor: {exam.instructor} | Duration: {exam.quiz.get('duration')} minutes")
    _set_bottom_border(header)
    if contains_arabic(exam.subject) or contains_arabic(exam.instructor):
        _set_bidi(header)
    header.alignment = WD_ALIGN_PARAGRAPH.LEFT

    for i, q in enumerate(exam.questions):
        question_text = q.get("question_text") or ""
        q_arabic = contains_arabic(question_text)

        p = doc.add_paragraph()
        p.add_run(f"{i + 1}. {question_text}").bold = True
        p.paragraph_format.space_after = QUESTION_SPACING_AFTER
        _orient(p, q_arabic)

        for j, o in enumerate(q.get("options", [])):
            option_text = o.get("option_text") or ""
            label = option_label(j, q_arabic or arabic_exam)
            op = doc.add_paragraph()
            op.add_run(f"{label}. {option_text}")
            op.paragraph_format.left_indent = OPTION_INDENT
            op.paragraph_format.space_after = OPTION_SPACING_AFTER
            _orient(op, contains_arabic(option_text) or q_arabic)

        spacer = doc.add_paragraph()
        spacer.paragraph_format.space_after = QUESTION_SPACING_AFTER

    if arabic_exam:
        _set_section_bidi(doc.sections[0])

    return doc


def render_docx(exam: ExamData) -> bytes:
    buffer = BytesIO()
    build_exam_document(exam).save(buffer)
    return buffer.getvalue()
