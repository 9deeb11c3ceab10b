import os

# Must be set before the app module configures logging and the default engine
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["LOG_FILE"] = ""

import pytest
import respx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storygen.config.settings import settings
from storygen.database.models import Base
from storygen.database.session import get_db, get_session_factory
from storygen.main import app
from storygen.services.generation import GenerationClient, get_generation_client

from payloads import completion_body, make_result, wrap_in_prose

LLM_BASE_URL = "http://llm.test/v1"


@pytest.fixture(scope="function")
def engine():
    # StaticPool: every session sees the same in-memory database
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def api_key():
    return "test-key"


@pytest.fixture
def generation_client(api_key):
    return GenerationClient(api_key=api_key, base_url=LLM_BASE_URL, model="test-model", timeout=5)


@pytest.fixture(scope="function")
def client(session_factory, generation_client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", tmp_path / "uploads")

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_generation_client] = lambda: generation_client

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir():
    return settings.UPLOAD_DIR


@pytest.fixture
def generation_result():
    return make_result()


@pytest.fixture
def mock_llm_router():
    """Mock all calls to the LLM endpoint"""
    with respx.mock(base_url=LLM_BASE_URL, assert_all_mocked=True, assert_all_called=False) as router:
        yield router


@pytest.fixture
def mock_completion(mock_llm_router, generation_result):
    """Successful completion: a valid result wrapped in chatty prose"""
    return mock_llm_router.post("/chat/completions").respond(
        status_code=200,
        json=completion_body(wrap_in_prose(generation_result)),
    )


@pytest.fixture
def mock_chat_response(mock_llm_router, request):
    """Parametrized mock returning arbitrary message content"""
    content = getattr(request, "param", "I could not find any requirements.")
    return mock_llm_router.post("/chat/completions").respond(
        status_code=200,
        json=completion_body(content),
    )


@pytest.fixture
def sample_pdf_bytes():
    from fpdf import FPDF
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    pdf.multi_cell(0, 10, "Customer portal requirements\nUsers must be able to reset passwords.")
    return bytes(pdf.output())


@pytest.fixture
def sample_docx_bytes():
    from io import BytesIO
    from docx import Document
    doc = Document()
    doc.add_paragraph("Customer portal requirements")
    doc.add_paragraph("Users must be able to reset passwords.")
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()
