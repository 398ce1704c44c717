import boto3
import pytest
from botocore.stub import ANY, Stubber

from exam_handlers.config import DOCX_CONTENT_TYPE, Settings
from exam_handlers.errors import StoreFailure
from exam_handlers.storage import DocumentStorage


@pytest.fixture
def s3():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


@pytest.fixture
def storage(s3):
    return DocumentStorage(Settings(storage_public_base_url="https://cdn.example.com/exam-pdfs/"), client=s3)


def test_exists_true_when_head_succeeds(storage, s3):
    with Stubber(s3) as stub:
        stub.add_response("head_object", {}, {"Bucket": "exam-pdfs", "Key": "quiz_1.docx"})
        assert storage.exists("quiz_1.docx") is True


def test_exists_false_when_object_missing(storage, s3):
    with Stubber(s3) as stub:
        stub.add_client_error("head_object", service_error_code="404", http_status_code=404)
        assert storage.exists("quiz_1.docx") is False


def test_other_storage_errors_are_raised(storage, s3):
    with Stubber(s3) as stub:
        stub.add_client_error("head_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StoreFailure):
            storage.exists("quiz_1.docx")


def test_upload_sets_content_type(storage, s3):
    with Stubber(s3) as stub:
        stub.add_response(
            "put_object",
            {},
            {"Bucket": "exam-pdfs", "Key": "quiz_1.docx", "Body": ANY, "ContentType": DOCX_CONTENT_TYPE},
        )
        storage.upload("quiz_1.docx", b"PK", DOCX_CONTENT_TYPE)
        stub.assert_no_pending_responses()


def test_public_url_is_deterministic(storage):
    assert storage.public_url("quiz_3.docx") == "https://cdn.example.com/exam-pdfs/quiz_3.docx"


def test_public_base_url_defaults():
    assert Settings(storage_endpoint="https://acc.r2.example.com/").public_base_url == \
        "https://acc.r2.example.com/exam-pdfs"
    assert Settings().public_base_url == "https://exam-pdfs.s3.amazonaws.com"
