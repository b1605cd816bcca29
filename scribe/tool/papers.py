"""Literature tools - arXiv search, PDF download and stored text access"""

import logging
import re
import uuid
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path

import httpx

from scribe.session.message import ToolResult
from scribe.storage.storage import Storage
from .base import Tool
from .context import ToolContext

logger = logging.getLogger(__name__)

ARXIV_API_URL = "http://export.arxiv.org/api/query"
ARXIV_PDF_URL = "https://arxiv.org/pdf/{arxiv_id}.pdf"
ATOM = "{http://www.w3.org/2005/Atom}"
ABSTRACT_LENGTH = 500

_ARXIV_ID_RE = re.compile(r"([0-9]+\.[0-9]+)(v[0-9]+)?")


def extract_arxiv_id(value: str | None) -> str | None:
    """Pull a version-less arXiv id out of an id or URL"""
    if not value:
        return None
    match = _ARXIV_ID_RE.search(value)
    return match.group(1) if match else None


def parse_arxiv_feed(xml_text: str) -> list[dict]:
    root = ET.fromstring(xml_text)
    papers = []
    for entry in root.findall(f"{ATOM}entry"):
        arxiv_id = extract_arxiv_id(entry.findtext(f"{ATOM}id", ""))
        pdf_url = None
        for link in entry.findall(f"{ATOM}link"):
            href = link.get("href", "")
            if link.get("type") == "application/pdf" and href:
                pdf_url = href
                arxiv_id = arxiv_id or extract_arxiv_id(href)
        if not pdf_url and arxiv_id:
            pdf_url = ARXIV_PDF_URL.format(arxiv_id=arxiv_id)

        summary = (entry.findtext(f"{ATOM}summary") or "").strip()
        abstract = summary[:ABSTRACT_LENGTH] + ("..." if len(summary) > ABSTRACT_LENGTH else "")
        papers.append({
            "arxiv_id": arxiv_id,
            "title": " ".join((entry.findtext(f"{ATOM}title") or "").split()),
            "authors": [
                name for name in
                (a.findtext(f"{ATOM}name") for a in entry.findall(f"{ATOM}author"))
                if name
            ],
            "abstract": abstract,
            "published": entry.findtext(f"{ATOM}published") or "",
            "has_pdf": bool(pdf_url),
        })
    return papers


def find_paper_by_title(papers: list[dict], title: str) -> dict | None:
    """Fuzzy title match: exact, then containment, then shared keywords"""
    if not title or not papers:
        return None

    wanted = title.lower().strip()
    for paper in papers:
        if paper.get("title", "").lower().strip() == wanted:
            return paper

    for paper in papers:
        candidate = paper.get("title", "").lower()
        if candidate and (wanted in candidate or candidate in wanted):
            return paper

    words = [w for w in wanted.split() if len(w) > 2]
    if not words:
        return None
    needed = min(3, len(words))
    for paper in papers:
        candidate = paper.get("title", "").lower()
        if sum(1 for w in words if w in candidate) >= needed:
            return paper
    return None


def find_downloaded_pdf(pdfs: list[dict], title: str) -> dict | None:
    wanted = title.lower().strip()
    compact = re.sub(r"\s+", "", wanted)
    for pdf in pdfs:
        desc = (pdf.get("description") or "").lower()
        pdf_title = (pdf.get("title") or "").lower()
        name = (pdf.get("name") or "").lower()
        if (
            (desc and (wanted in desc or desc in wanted))
            or (pdf_title and (wanted in pdf_title or pdf_title in wanted))
            or (compact and compact in name)
        ):
            return pdf
    return None


class SearchPapersTool(Tool):
    name = "search_papers"
    description = "Search arXiv for academic papers. Results include the arXiv id used to download the PDF."
    transport: httpx.AsyncBaseTransport | None = None

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search keywords"},
                "max_results": {"type": "integer", "default": 10},
            },
            "required": ["query"],
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        query = args.get("query")
        if not query:
            return ToolResult.fail("query must not be empty")
        max_results = args.get("max_results") or 10

        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
                response = await client.get(ARXIV_API_URL, params={
                    "search_query": f"all:{query}",
                    "start": 0,
                    "max_results": max_results,
                })
                response.raise_for_status()
            papers = parse_arxiv_feed(response.text)
        except httpx.HTTPError as e:
            return ToolResult.fail(f"arXiv search failed: {e}")
        except ET.ParseError as e:
            return ToolResult.fail(f"arXiv returned an unreadable feed: {e}")

        context.search_results = papers
        logger.info(f"arXiv search returned {len(papers)} papers for title matching")
        return ToolResult.ok({"query": query, "count": len(papers), "papers": papers})


class DownloadPaperTool(Tool):
    name = "download_paper"
    description = (
        "Download a paper PDF into the resource library, by title "
        "(matched against the latest search results) or by arXiv id."
    )
    transport: httpx.AsyncBaseTransport | None = None

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Paper title from search results"},
                "arxiv_id": {"type": "string", "description": "arXiv id, e.g. 2301.07041"},
            },
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        title = args.get("title")
        arxiv_id = args.get("arxiv_id")
        matched = None

        if title:
            matched = find_paper_by_title(context.search_results, title)
            if matched is None:
                known = "; ".join(p.get("title", "") for p in context.search_results[:5])
                return ToolResult.fail(
                    f'No paper matching "{title}". Search with search_papers first or pass arxiv_id.',
                    suggestion=f"Available titles: {known}" if known else None,
                )
            arxiv_id = matched.get("arxiv_id")

        clean_id = extract_arxiv_id(arxiv_id) or (arxiv_id or "").split("v")[0].strip()
        if not clean_id:
            return ToolResult.fail("Provide a paper title or arxiv_id")

        pdf_url = ARXIV_PDF_URL.format(arxiv_id=clean_id)
        try:
            async with httpx.AsyncClient(timeout=60.0, follow_redirects=True, transport=self.transport) as client:
                response = await client.get(pdf_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            return ToolResult.fail(f"Download failed: {e}")

        downloads = context.downloads_dir or Storage.BASE_DIR / "downloads"
        downloads = Path(downloads)
        downloads.mkdir(parents=True, exist_ok=True)
        filename = f"{clean_id}.pdf"
        file_path = downloads / filename
        file_path.write_bytes(response.content)

        paper_title = (matched or {}).get("title") or f"arXiv paper {clean_id}"
        resource_id, _ = context.library.upsert("pdfs", {
            "id": str(uuid.uuid4()),
            "name": filename,
            "title": paper_title,
            "description": paper_title,
            "arxiv_id": clean_id,
            "authors": (matched or {}).get("authors", []),
            "url": pdf_url,
            "file_path": str(file_path),
            "fileSize": len(response.content),
            "uploadDate": datetime.now().isoformat(),
            "extractedText": "",
            "hasTextContent": False,
        })

        return ToolResult.ok({
            "message": f'Downloaded "{paper_title}"',
            "title": paper_title,
            "arxiv_id": clean_id,
            "filename": filename,
            "file_path": str(file_path),
            "pdf_url": pdf_url,
            "resource_id": resource_id,
            "resource_type": "pdfs",
        })


class ReadPdfContentTool(Tool):
    name = "read_pdf_content"
    description = "Read the text of a downloaded PDF, by title, resource_id, arxiv_id or filename."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "resource_id": {"type": "string"},
                "arxiv_id": {"type": "string"},
                "filename": {"type": "string"},
            },
        }

    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        title = args.get("title")
        resource_id = args.get("resource_id")
        arxiv_id = args.get("arxiv_id")
        filename = args.get("filename")
        if not any([title, resource_id, arxiv_id, filename]):
            return ToolResult.fail("Provide one of title, resource_id, arxiv_id or filename")

        pdfs = context.library.list_type("pdfs")
        pdf = find_downloaded_pdf(pdfs, title) if title else None
        if pdf is None and resource_id:
            pdf = next((p for p in pdfs if p.get("id") == resource_id), None)
        if pdf is None and arxiv_id:
            clean_id = extract_arxiv_id(arxiv_id) or arxiv_id
            pdf = next(
                (p for p in pdfs if p.get("arxiv_id") == clean_id or p.get("name") == f"{clean_id}.pdf"),
                None,
            )
        if pdf is None and filename:
            pdf = next((p for p in pdfs if p.get("name") == filename), None)

        if pdf is None:
            return ToolResult.fail(
                "PDF resource not found" + (f': "{title}"' if title else ""),
                available_papers=[
                    {"title": p.get("title") or p.get("description"), "arxiv_id": p.get("arxiv_id"), "name": p.get("name")}
                    for p in pdfs
                ],
            )

        text = pdf.get("extractedText") or ""
        if not text:
            return ToolResult.fail(f"No text content available for {pdf.get('name')}")

        return ToolResult.ok({
            "resource_id": pdf.get("id"),
            "title": pdf.get("title") or pdf.get("description"),
            "arxiv_id": pdf.get("arxiv_id"),
            "name": pdf.get("name"),
            "text": text,
            "text_source": "stored",
            "text_stats": pdf.get("textStats") or {
                "textLength": len(text),
                "numWords": len(text.split()),
            },
            "full_text_length": len(text),
        })
