"""
Test fixtures for the uploader.
"""
import threading
import time

import boto3
import pytest
from botocore.stub import Stubber
from moto import mock_aws as moto_mock_aws

from static_uploader.config import load_config
from static_uploader.exceptions import UploadError
from static_uploader.models import UploadPolicy
from static_uploader.storage import ObjectStorage

BUILD_FILES = {
    "dist/index.html": "<html></html>",
    "dist/static/js/app.js": "console.log(1)",
    "dist/static/css/app.css": "body {}",
    "dist/tmp/build.log": "log",
    "src/main.js": "source",
}


class FakeStorage:
    """In-memory stand-in for ObjectStorage that records concurrency."""

    def __init__(self, bucket="test-bucket", fail_keys=(), delay=0.0):
        self.bucket = bucket
        self.fail_keys = set(fail_keys)
        self.delay = delay
        self.put_calls = []
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def build_upload_policy(self, key):
        return UploadPolicy.issue(self.bucket, key, expires=7200, insert_only=True)

    def put_file(self, policy, key, local_path):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
            self.put_calls.append(local_path)
        try:
            if self.delay:
                time.sleep(self.delay)
            if key in self.fail_keys:
                raise UploadError(local_path, key, "code: 500", 500)
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def build_dir(tmp_path):
    """Create a project directory with a dist/ build output."""
    for rel_path, content in BUILD_FILES.items():
        file_path = tmp_path / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
    return tmp_path.resolve()


@pytest.fixture
def config(build_dir):
    """Create a config rooted at the build directory."""
    return load_config(cwd=str(build_dir), bucket="test-bucket")


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_aws(aws_credentials):
    """Mock S3 client using moto."""
    with moto_mock_aws():
        s3 = boto3.client('s3', region_name='us-east-1')
        # Create test bucket
        s3.create_bucket(Bucket='test-bucket')
        yield s3


@pytest.fixture
def s3_storage(mock_aws, config):
    """Create an ObjectStorage backed by moto."""
    return ObjectStorage(config)


@pytest.fixture
def stubbed_client(aws_credentials):
    """A real S3 client with a Stubber attached, for canned error responses."""
    client = boto3.client('s3', region_name='us-east-1')
    return client, Stubber(client)
