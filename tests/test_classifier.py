"""
Unit tests for the rule-based classifier
"""

import pytest

from conftest import make_message
from day_planner.classifier import Classifier
from day_planner.models import Category


@pytest.fixture
def classifier():
    return Classifier()


def test_invoice_is_bills(classifier):
    message = make_message(subject="Invoice due", body_text="Payment due 15/12/2025 of $150")
    assert classifier.classify(message) == Category.BILLS


def test_code_message_is_otp(classifier):
    message = make_message(subject="Your code is 482913", body_text="verify your login")
    assert classifier.classify(message) == Category.OTP


@pytest.mark.parametrize(
    "subject,body",
    [
        ("Your verification code", "Meeting invoice discount sale internship"),
        ("Interview tomorrow", "Your OTP for the job portal is 1234"),
        ("Limited time deal", "Use the one-time password 992211 to confirm"),
        ("Zoom meeting", "security code 5521 for your account"),
    ],
)
def test_strong_otp_phrase_beats_other_keywords(classifier, subject, body):
    assert classifier.classify(make_message(subject=subject, body_text=body)) == Category.OTP


def test_digest_mentioning_otp_is_not_otp(classifier):
    message = make_message(subject="Your weekly digest with your OTP", body_text="Highlights of the week")
    assert classifier.classify(message) != Category.OTP


def test_noreply_six_digit_code_is_otp(classifier):
    message = make_message(
        subject="Sign-in attempt",
        body_text="Enter 104932 to verify it is you",
        sender="no-reply@accounts.example.com",
    )
    assert classifier.classify(message) == Category.OTP


@pytest.mark.parametrize("attachments", [("report.pdf",), ("a.pdf", "b.xlsx")])
def test_no_signal_with_attachment_is_attachments(classifier, attachments):
    message = make_message(subject="Hello", body_text="See attached.", attachments=attachments)
    assert classifier.classify(message) == Category.ATTACHMENTS


def test_no_signal_without_attachment_is_other(classifier):
    assert classifier.classify(make_message(subject="Hello", body_text="How are you?")) == Category.OTHER


def test_internship_subject_wins(classifier):
    message = make_message(subject="Summer internship interview", body_text="We are hiring interns")
    assert classifier.classify(message) == Category.INTERNSHIP_MEETINGS


def test_interview_is_job_meeting(classifier):
    message = make_message(subject="Interview invitation", body_text="Please join the call")
    assert classifier.classify(message) == Category.JOB_MEETINGS


def test_zoom_meeting(classifier):
    message = make_message(subject="Team sync on Zoom", body_text="Meeting at 3:00 PM")
    assert classifier.classify(message) == Category.MEETINGS


def test_course_mail_is_student_meeting(classifier):
    message = make_message(subject="Lecture moved", body_text="The class is now in room 4", sender="prof@cs.university.edu")
    assert classifier.classify(message) == Category.STUDENT_MEETINGS


def test_job_alert_from_careers_sender(classifier):
    message = make_message(subject="Job alert: backend engineer", body_text="Apply now", sender="careers@acme.com")
    assert classifier.classify(message) == Category.JOBS


def test_promotional_noreply(classifier):
    message = make_message(
        subject="Big savings inside",
        body_text="Click to unsubscribe from promotional mail",
        sender="noreply@store.example.com",
    )
    assert classifier.classify(message) == Category.PROMOTIONS


def test_shared_document_beats_promotions(classifier):
    message = make_message(subject="Alex shared a document with you", body_text="Open the doc")
    assert classifier.classify(message) == Category.ATTACHMENTS


def test_keywords_respect_word_boundaries(classifier):
    # "classic" must not count as "class", "salesforce" not as "sale"
    message = make_message(subject="Classic salesforce notes", body_text="nothing here")
    assert classifier.classify(message) == Category.OTHER


def test_missing_fields_fall_back(classifier):
    message = make_message(subject="", body_text="")
    assert classifier.classify(message) == Category.OTHER


def test_every_message_maps_to_one_category(classifier):
    subjects = ["Invoice", "Zoom", "Sale", "Hi", "Interview", "Job alert", "Lecture"]
    for subject in subjects:
        assert isinstance(classifier.classify(make_message(subject=subject)), Category)
