"""
Pytest configuration and fixtures.
"""

import pytest

from chronocost.config import Config
from chronocost.document_store import LocalDocumentStore
from chronocost.schema import FormInput


HISTORY_CSV = (
    "projectName,duration,cost,delayed,actualCost,estimatedCost\n"
    "Ring Road,10,1000,true,1200,1000\n"
    "Metro Depot,20,2000,false,2000,2000"
)


@pytest.fixture
def config(tmp_path):
    """Config pointing the local store at a temp directory."""
    return Config(
        database_id="testdb",
        projects_collection_id="projects",
        store_backend="local",
        local_store_dir=str(tmp_path / "store"),
    )


@pytest.fixture
def store(config):
    return LocalDocumentStore(config.local_store_dir)


@pytest.fixture
def history_csv():
    return HISTORY_CSV


@pytest.fixture
def history_rows():
    return [
        {
            "duration": "10",
            "cost": "1000",
            "delayed": "true",
            "actualCost": "1200",
            "estimatedCost": "1000",
        },
        {
            "duration": "20",
            "cost": "2000",
            "delayed": "false",
            "actualCost": "2000",
            "estimatedCost": "2000",
        },
    ]


@pytest.fixture
def construction_form():
    return FormInput(
        company_name="Acme Builders",
        project_name="Harbour Bridge Retrofit",
        project_type="Construction",
        location="Mumbai",
        terrain="flat",
        estimated_budget=250000,
        estimated_duration=18,
        scope_description="Seismic retrofit of the main span",
        risk_factors="Monsoon season",
        categories="Bridge",
    )
