import pytest

from carnet.engine import Carnet
from carnet.tools.base import FunctionTool


def researcher_manifest() -> dict:
    return {
        "version": 1,
        "app": {"globalInitialSkills": [], "globalSkills": []},
        "agents": {
            "researcher": {
                "name": "researcher",
                "description": "A test agent",
                "prompt": "You are a research assistant for {{ COMPANY }}.",
                "initialSkills": ["webSearch"],
                "skills": ["dataAnalysis"],
            },
        },
        "skills": {
            "webSearch": {
                "name": "webSearch",
                "description": "A skill for searching the web.",
                "toolsets": ["search"],
                "content": "# Web search\n\nSearch carefully on behalf of {{ COMPANY }}.",
            },
            "dataAnalysis": {
                "name": "dataAnalysis",
                "description": "A skill for analyzing data.",
                "toolsets": ["analysis"],
                "files": [
                    {
                        "path": "guides/stats.md",
                        "description": "Statistics cheat sheet",
                        "content": "Use the median for {{ DATASET }}.",
                    },
                    {"path": "guides/empty.md", "description": "Not embedded"},
                ],
                "content": "# Data analysis\n\nThis skill enables data analysis.",
            },
        },
        "toolsets": {
            "search": {
                "name": "search",
                "description": "Tools for searching.",
                "tools": ["basicSearch", "advancedSearch"],
                "content": "This toolset contains search tools.",
            },
            "analysis": {
                "name": "analysis",
                "description": "Tools for data analysis.",
                "tools": ["analyzeData"],
                "content": "This toolset contains analysis tools.",
            },
        },
        "tools": {
            "basicSearch": {
                "name": "basicSearch",
                "description": "Perform a basic web search",
                "content": "Use basicSearch for simple queries.",
            },
            "advancedSearch": {
                "name": "advancedSearch",
                "description": "Perform an advanced search",
                "content": "Use advancedSearch with filters.",
            },
            "analyzeData": {
                "name": "analyzeData",
                "description": "Analyze a dataset",
                "content": "Pass a list of numbers.",
            },
        },
    }


@pytest.fixture
def manifest_data():
    return researcher_manifest()


@pytest.fixture
def environ():
    return {"CARNET_REGION": "eu", "PUBLIC_SITE": "example.org", "SECRET_TOKEN": "hunter2"}


@pytest.fixture
def carnet(manifest_data, environ):
    return Carnet(manifest_data, variables={"COMPANY": "Acme"}, environ=lambda: environ)


@pytest.fixture
def domain_tools():
    async def basic_search(args):
        return {"result": f"Results for {args['query']}"}

    def advanced_search(args):
        return {"result": f"Advanced results for {args['query']}"}

    def analyze_data(args):
        return {"sum": sum(args["data"])}

    return {
        "basicSearch": FunctionTool(
            basic_search, name="basicSearch", description="Perform a basic web search"
        ),
        "advancedSearch": FunctionTool(
            advanced_search, name="advancedSearch", description="Perform an advanced search"
        ),
        "analyzeData": FunctionTool(
            analyze_data, name="analyzeData", description="Analyze a dataset"
        ),
    }
