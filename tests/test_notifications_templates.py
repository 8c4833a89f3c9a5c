"""Unit tests for digest template rendering."""

import pytest

from job_alerts.config.models import LinksConfig
from job_alerts.notifications.models import NotificationTemplateError
from job_alerts.notifications.payloads import build_digest_context
from job_alerts.notifications.templates import TemplateRenderer
from tests.helpers import make_alert, make_company, make_job


@pytest.fixture
def renderer():
    return TemplateRenderer()


@pytest.fixture
def context():
    alert = make_alert(user_name="Jane")
    jobs = [
        make_job("job-1", title="Backend Engineer", company=make_company()),
        make_job("job-2", title="Data Engineer", salary_min=None, company=None),
    ]
    return build_digest_context(alert, jobs, LinksConfig(base_url="https://jobs.example.com"))


class TestTemplateRenderer:
    def test_subject_is_single_line(self, renderer, context):
        rendered = renderer.render(context)

        assert rendered["subject"] == "2 new jobs matching your alert"
        assert "\n" not in rendered["subject"]

    def test_html_body(self, renderer, context):
        html = renderer.render(context)["html_body"]

        assert "New Jobs Matching Your Alert" in html
        assert "Hello Jane," in html
        assert "Backend Engineer" in html
        assert "Data Engineer" in html
        assert "$60,000-$80,000" in html
        assert 'href="https://jobs.example.com/jobs/job-1"' in html
        assert 'href="https://jobs.example.com/apply/job-2"' in html
        assert "View Job" in html
        assert "Apply Now" in html
        assert "Manage Your Alerts" in html
        assert "https://jobs.example.com/profile/alerts" in html

    def test_text_body(self, renderer, context):
        text = renderer.render(context)["text_body"]

        assert "Hello Jane," in text
        assert "View Job: https://jobs.example.com/jobs/job-1" in text
        assert "Apply Now: https://jobs.example.com/apply/job-1" in text
        assert "Manage Your Alerts: https://jobs.example.com/profile/alerts" in text

    def test_html_escapes_posting_text(self, renderer, context):
        context["jobs"][0]["title"] = "<script>alert(1)</script>"

        html = renderer.render(context)["html_body"]

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_missing_key_raises(self, renderer, context):
        del context["manage_alerts_url"]

        with pytest.raises(NotificationTemplateError):
            renderer.render(context)

    def test_missing_template_raises(self, context):
        renderer = TemplateRenderer(subject_template="missing.j2")

        with pytest.raises(NotificationTemplateError):
            renderer.render(context)

    def test_text_and_subject_are_not_html_escaped(self, renderer):
        links = LinksConfig(base_url="https://jobs.example.com", manage_alerts_path="/alerts?tab=a&b=1")
        context = build_digest_context(
            make_alert(user_name="Jane"), [make_job(title="R&D Engineer")], links
        )

        rendered = renderer.render(context)

        assert "R&D Engineer" in rendered["text_body"]
        assert "/alerts?tab=a&b=1" in rendered["text_body"]
        assert "&amp;" not in rendered["text_body"]
        assert "R&amp;D Engineer" in rendered["html_body"]
