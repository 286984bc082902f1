import os
import sys
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def read_source(source):
    """Return (html, url): local files are read, anything else is treated as a URL."""
    if os.path.exists(source):
        with open(source, "r", encoding="utf-8") as fh:
            return fh.read(), None
    return None, source


def audit_source(source):
    from akwaaba.audit import audit_html, audit_url

    html, url = read_source(source)
    if html is not None:
        return audit_html(html)
    return audit_url(url)


def print_report(source, issues):
    from akwaaba.audit import summarize

    summary = summarize(issues)
    print(f"{source}: {summary['total']} issue(s) {summary['by_severity']}")
    for issue in issues:
        print(f"  [{issue.severity:<6}] {issue.type:<7} {issue.element or '-':<8} {issue.message}")


if __name__ == "__main__":
    sources = sys.argv[1:] or [os.getenv("AUDIT_URL", "")]
    sources = [s for s in sources if s]
    if not sources:
        raise SystemExit("Usage: python run_audit.py <url-or-html-file> [...] (or set AUDIT_URL)")

    failed = 0
    for source in sources:
        try:
            issues = audit_source(source)
        except Exception as e:
            print(f"{source}: audit failed: {e}")
            failed += 1
            continue
        print_report(source, issues)
        if any(i.severity == "high" for i in issues):
            failed += 1

    raise SystemExit(1 if failed else 0)
