# akwaaba/audit.py
"""Accessibility audit heuristics for rendered pages.

Checks images, headings, form controls, buttons and landmarks the same way
the in-browser audit does, on HTML fetched with Playwright or passed in.
"""
import os
from collections import Counter
from typing import Dict, List

from bs4 import BeautifulSoup
from dotenv import load_dotenv
from playwright.sync_api import sync_playwright, TimeoutError as PWTimeout

from .schemas import AuditIssue
from .utils import logger, retry

# try to detect available parser; prefer lxml if installed
try:
    import lxml  # type: ignore # noqa: F401
    _bs_parser = "lxml"
except ImportError:
    _bs_parser = "html.parser"

load_dotenv()
HEADLESS = os.getenv("AUDIT_HEADLESS", "1") == "1"
TIMEOUT_MS = int(os.getenv("AUDIT_TIMEOUT_MS", "60000"))

LANDMARK_ROLES = ("main", "navigation", "banner", "contentinfo")
UNLABELLED_INPUT_TYPES = ("hidden", "submit", "button", "reset", "image")


def _has_aria_name(el) -> bool:
    return bool((el.get("aria-label") or "").strip() or el.get("aria-labelledby"))


def _check_images(soup, issues):
    for i, img in enumerate(soup.find_all("img")):
        if not (img.get("alt") or "").strip() and not _has_aria_name(img):
            issues.append(AuditIssue(
                id=f"img-{i}", type="error", severity="high", element="IMG",
                message="Image missing alt text or aria-label",
            ))


def _check_headings(soup, issues):
    previous = 0
    for i, heading in enumerate(soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])):
        level = int(heading.name[1])
        if level - previous > 1:
            issues.append(AuditIssue(
                id=f"heading-{i}", type="warning", severity="medium", element=heading.name.upper(),
                message=f"Heading level skipped from h{previous} to h{level}",
            ))
        previous = level


def _check_form_controls(soup, issues):
    labelled = {label.get("for") for label in soup.find_all("label") if label.get("for")}
    for i, control in enumerate(soup.find_all(["input", "select", "textarea"])):
        if control.name == "input" and (control.get("type") or "").lower() in UNLABELLED_INPUT_TYPES:
            continue
        wrapped = control.find_parent("label") is not None
        if control.get("id") in labelled or wrapped or _has_aria_name(control):
            continue
        issues.append(AuditIssue(
            id=f"input-{i}", type="error", severity="high", element=control.name.upper(),
            message="Form input missing label, aria-label, or aria-labelledby",
        ))


def _check_buttons(soup, issues):
    for i, button in enumerate(soup.find_all("button")):
        if not button.get_text(strip=True) and not _has_aria_name(button):
            issues.append(AuditIssue(
                id=f"button-{i}", type="error", severity="high", element="BUTTON",
                message="Button missing text content, aria-label, or aria-labelledby",
            ))


def _check_landmarks(soup, issues):
    landmarks = soup.find_all(attrs={"role": lambda r: r in LANDMARK_ROLES})
    for i, landmark in enumerate(landmarks):
        if not _has_aria_name(landmark):
            issues.append(AuditIssue(
                id=f"landmark-{i}", type="warning", severity="medium", element=landmark.name.upper(),
                message="Landmark missing aria-label or aria-labelledby",
            ))


def _check_document(soup, issues):
    html = soup.find("html")
    if html is None or not (html.get("lang") or "").strip():
        issues.append(AuditIssue(
            id="document-lang", type="warning", severity="medium", element="HTML",
            message="Document missing lang attribute",
        ))
    title = soup.find("title")
    if title is None or not title.get_text(strip=True):
        issues.append(AuditIssue(
            id="document-title", type="warning", severity="low", element="TITLE",
            message="Document missing a title",
        ))
    if soup.find("main") is None and soup.find(attrs={"role": "main"}) is None:
        issues.append(AuditIssue(
            id="document-main", type="info", severity="low",
            message="No main landmark; skip-to-content links have no target",
        ))


def audit_html(html: str) -> List[AuditIssue]:
    soup = BeautifulSoup(html or "", _bs_parser)
    issues: List[AuditIssue] = []
    _check_images(soup, issues)
    _check_headings(soup, issues)
    _check_form_controls(soup, issues)
    _check_buttons(soup, issues)
    _check_landmarks(soup, issues)
    # fragments get no document-level checks
    if "<html" in (html or "").lower():
        _check_document(soup, issues)
    return issues


def summarize(issues: List[AuditIssue]) -> Dict:
    return {
        "total": len(issues),
        "by_severity": dict(Counter(i.severity for i in issues)),
        "by_type": dict(Counter(i.type for i in issues)),
    }


@retry(PWTimeout, tries=3, delay=2, backoff=2)
def _render(page, url):
    page.goto(url, timeout=TIMEOUT_MS)
    page.wait_for_load_state("networkidle", timeout=TIMEOUT_MS)
    return page.content()


def fetch_page_html(url: str) -> str:
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=HEADLESS)
        try:
            page = browser.new_page()
            return _render(page, url)
        finally:
            browser.close()


def audit_url(url: str) -> List[AuditIssue]:
    html = fetch_page_html(url)
    issues = audit_html(html)
    logger.info("Audited %s: %d issues", url, len(issues))
    return issues
