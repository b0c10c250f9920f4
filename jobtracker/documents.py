# documents.py
"""Resume export: LaTeX source and a print-ready HTML preview.

Both renderers are pure. The same resume always produces the same bytes,
and nothing here touches the network or the database.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from jinja2 import Environment, StrictUndefined

from jobtracker.schemas.resume import PersonalInfo, ResumeIn

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_ISO_MONTH = re.compile(r"^\s*(\d{4})-(\d{1,2})(?:-\d{1,2})?")

LATEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}
# hyperref reads the url argument verbatim except for these
LATEX_URL_SPECIALS = {"\\": "", "{": r"\{", "}": r"\}", "%": r"\%", "#": r"\#"}


def format_date(value: Optional[str]) -> str:
    """'2023-04' or '2023-04-17' -> 'Apr 2023'. Anything else is kept as written."""
    if not value:
        return ""
    match = _ISO_MONTH.match(value)
    if not match:
        return value.strip()
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return value.strip()
    return f"{MONTHS[month - 1]} {year}"


def split_bullets(text: Optional[str]) -> list[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def latex_escape(value: Any) -> str:
    return "".join(LATEX_SPECIALS.get(ch, ch) for ch in str(value))


def latex_url(value: Any) -> str:
    return "".join(LATEX_URL_SPECIALS.get(ch, ch) for ch in str(value))


def _link_text(url: str) -> str:
    return url.replace("https://", "", 1)


@dataclass(frozen=True)
class ContactItem:
    text: str
    href: Optional[str] = None


def _coerce(resume: Union[ResumeIn, dict]) -> ResumeIn:
    if isinstance(resume, ResumeIn):
        return resume
    return ResumeIn.model_validate(resume)


def resume_context(resume: Union[ResumeIn, dict]) -> dict:
    """Flatten a resume into what both templates render: formatted dates, bullets, contact row."""
    doc = _coerce(resume)
    info = doc.personal_info or PersonalInfo()

    contact = []
    if info.email:
        contact.append(ContactItem(info.email))
    if info.phone:
        contact.append(ContactItem(info.phone))
    if info.linkedin:
        contact.append(ContactItem(_link_text(info.linkedin), href=info.linkedin))
    if info.website:
        contact.append(ContactItem(_link_text(info.website), href=info.website))

    experience = [
        {
            "company": exp.company,
            "position": exp.position,
            "location": exp.location,
            "start": format_date(exp.startDate),
            "end": "Present" if exp.current else format_date(exp.endDate),
            "bullets": split_bullets(exp.description),
        }
        for exp in doc.experience
    ]
    education = [
        {
            "institution": edu.institution,
            "degree": edu.degree,
            "field": edu.field,
            "gpa": edu.gpa or "",
            "start": format_date(edu.startDate),
            "end": format_date(edu.endDate),
        }
        for edu in doc.education
    ]
    skills = [
        {"category": group.category, "joined": ", ".join(group.items)}
        for group in doc.skills
    ]
    return {
        "name": info.fullName,
        "contact": contact,
        "summary": (doc.summary or "").strip(),
        "experience": experience,
        "education": education,
        "skills": skills,
    }


# ---------- LaTeX ----------
# Custom delimiters keep jinja out of LaTeX's braces and percent signs.
_latex_env = Environment(
    variable_start_string="<<<",
    variable_end_string=">>>",
    block_start_string="<%%",
    block_end_string="%%>",
    comment_start_string="<#",
    comment_end_string="#>",
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    autoescape=False,
    undefined=StrictUndefined,
)
_latex_env.filters["tex"] = latex_escape
_latex_env.filters["texurl"] = latex_url

LATEX_TEMPLATE = r"""\documentclass[10pt]{extarticle}

\usepackage[top=0.5in, bottom=0.5in, left=0.5in, right=0.5in]{geometry}
\usepackage{enumitem}
\usepackage{tabto}
\usepackage{hyperref}
\hypersetup{
    colorlinks=true,
    linkcolor=blue,
    filecolor=magenta,
    urlcolor=cyan,
    }
\renewcommand{\familydefault}{\sfdefault}

\begin{document}
\begin{center}
\thispagestyle{empty}
\Huge \textbf{<<< name|tex >>> \\}
\normalsize <%% for item in contact %%><%% if not loop.first %%> $\mid$ <%% endif %%><%% if item.href %%>\href{<<< item.href|texurl >>>}{<<< item.text|tex >>>}<%% else %%><<< item.text|tex >>><%% endif %%><%% endfor %%> \\
\hrulefill
\end{center}
<%% if summary %%>

%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
% SUMMARY
%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
\noindent \textbf{\underline{SUMMARY}} \\
<<< summary|tex >>>
\vspace{1mm}
<%% endif %%>
<%% if education %%>

%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
% EDUCATION
%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
\noindent \textbf{\underline{EDUCATION}} \\
<%% for edu in education %%>
\textbf{<<< edu.institution|tex >>>} \hfill \\
\textit{<<< edu.degree|tex >>> in <<< edu.field|tex >>>}<%% if edu.gpa %%> \hspace{2mm} GPA: <<< edu.gpa|tex >>><%% endif %%> \hfill <<< edu.start|tex >>> $-$ <<< edu.end|tex >>> \\
<%% endfor %%>
\vspace{1mm}
<%% endif %%>
<%% if skills %%>

%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
% TECHNICAL SKILLS
%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
\noindent \textbf{\underline{TECHNICAL SKILLS}}
<%% for skill in skills %%>
\begin{itemize}[noitemsep,nolistsep,leftmargin=1 cm]
\item {<<< skill.category|tex >>>: <<< skill.joined|tex >>>}
\end{itemize}
<%% endfor %%>
\vspace{1.5mm}
<%% endif %%>
<%% if experience %%>

%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
% WORK EXPERIENCE
%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%%
\noindent \textbf{\underline{EXPERIENCE}} \\
<%% for exp in experience %%>
\noindent \textbf{<<< exp.company|tex >>>} \hfill <<< exp.location|tex >>> \\
\textit{<<< exp.position|tex >>>} \hfill <<< exp.start|tex >>> $-$ <<< exp.end|tex >>>
<%% if exp.bullets %%>
\begin{itemize}[noitemsep, nolistsep, leftmargin=1cm]
<%% for line in exp.bullets %%>
\item {<<< line|tex >>>}
<%% endfor %%>
\end{itemize}
<%% endif %%>
\vspace{1mm}
<%% endfor %%>
<%% endif %%>

\end{document}
"""

_latex_template = _latex_env.from_string(LATEX_TEMPLATE)


def generate_latex(resume: Union[ResumeIn, dict]) -> str:
    return _latex_template.render(**resume_context(resume))


# ---------- HTML ----------
_html_env = Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    autoescape=True,
    undefined=StrictUndefined,
)

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{{ name }} - Resume</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
            font-size: 10pt;
            line-height: 1.1;
            color: black;
            background: white;
            max-width: 8.5in;
            margin: 0 auto;
            padding: 0.5in;
        }
        .header { text-align: center; margin-bottom: 15px; }
        .name { font-size: 22pt; font-weight: bold; margin-bottom: 6px; }
        .contact { font-size: 9pt; margin-bottom: 6px; }
        .contact a { color: #0066cc; text-decoration: none; }
        hr { border: none; height: 1px; background-color: black; margin: 8px 0; }
        .section-title { font-weight: bold; text-decoration: underline; font-size: 10pt; margin: 12px 0 4px 0; }
        .entry { margin-bottom: 8px; }
        .entry-header { display: flex; justify-content: space-between; font-weight: bold; font-size: 10pt; }
        .entry-subheader { display: flex; justify-content: space-between; font-style: italic; margin-bottom: 3px; font-size: 9pt; }
        .summary, .description, .skills-category { margin: 3px 0 3px 15px; font-size: 9pt; }
        @media print {
            body { margin: 0; padding: 0.5in; max-width: none; }
            .no-print { display: none; }
        }
        @page { margin: 0.5in; size: letter; }
    </style>
</head>
<body>
    <div class="header">
        <div class="name">{{ name }}</div>
        <div class="contact">
            {% for item in contact %}{% if not loop.first %} | {% endif %}{% if item.href %}<a href="{{ item.href }}">{{ item.text }}</a>{% else %}{{ item.text }}{% endif %}{% endfor %}

        </div>
        <hr>
    </div>
{% if summary %}
    <div class="section-title">SUMMARY</div>
    <div class="summary">{{ summary }}</div>
{% endif %}
{% if education %}
    <div class="section-title">EDUCATION</div>
{% for edu in education %}
    <div class="entry">
        <div class="entry-header">
            <span>{{ edu.institution }}</span>
            <span></span>
        </div>
        <div class="entry-subheader">
            <span>{{ edu.degree }} in {{ edu.field }}{% if edu.gpa %} | GPA: {{ edu.gpa }}{% endif %}</span>
            <span>{{ edu.start }} - {{ edu.end }}</span>
        </div>
    </div>
{% endfor %}
{% endif %}
{% if skills %}
    <div class="section-title">TECHNICAL SKILLS</div>
{% for skill in skills %}
    <div class="skills-category">&bull; {{ skill.category }}: {{ skill.joined }}</div>
{% endfor %}
{% endif %}
{% if experience %}
    <div class="section-title">EXPERIENCE</div>
{% for exp in experience %}
    <div class="entry">
        <div class="entry-header">
            <span>{{ exp.company }}</span>
            <span>{{ exp.location }}</span>
        </div>
        <div class="entry-subheader">
            <span>{{ exp.position }}</span>
            <span>{{ exp.start }} - {{ exp.end }}</span>
        </div>
{% for line in exp.bullets %}
        <div class="description">&bull; {{ line }}</div>
{% endfor %}
    </div>
{% endfor %}
{% endif %}
</body>
</html>
"""

_html_template = _html_env.from_string(HTML_TEMPLATE)


def generate_html_preview(resume: Union[ResumeIn, dict]) -> str:
    return _html_template.render(**resume_context(resume))
