"""Serialize rich-text documents to chat markdown.

The output is what gets stored and later re-read by the tokenizer. Plain text
runs are written verbatim: a literal ``*`` or ``[`` typed by the user is not
escaped and may be read back as formatting.
"""

from chatmark.document import Document, LinkRun, MentionRun, Paragraph, Run, TextRun


def serialize_run(run: Run) -> str:
    """Serialize a single run."""
    if isinstance(run, MentionRun):
        trigger = run.kind.trigger
        if run.id:
            return f"{trigger}{run.name}[{run.id}]"
        return f"{trigger}{run.name}"
    if isinstance(run, LinkRun):
        return f"[{run.text}]({run.url})"
    if isinstance(run, TextRun):
        if not run.text:
            return ""
        if run.bold and run.italic:
            out = f"***{run.text}***"
        elif run.bold:
            out = f"**{run.text}**"
        elif run.italic:
            out = f"*{run.text}*"
        else:
            out = run.text
        if run.spoiler:
            out = f"||{out}||"
        return out
    raise TypeError(f"Not a document run: {run!r}")


def serialize_paragraph(paragraph: Paragraph) -> str:
    body = "".join(serialize_run(run) for run in paragraph.runs)
    if paragraph.quote:
        return f"> {body}"
    return body


def serialize(document: Document) -> str:
    """Serialize a document, one line per paragraph."""
    return "\n".join(serialize_paragraph(p) for p in document.paragraphs)
