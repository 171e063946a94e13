import os
import re

from setuptools import find_packages, setup

# Read version from the package without importing it
init_file = os.path.join("dynamo_es_stream", "__init__.py")
with open(init_file, "r", encoding="utf-8") as f:
    init_content = f.read()

version_match = re.search(
    r'__version__\s*=\s*["\']([^"\']+)["\']', init_content
)
if not version_match:
    raise RuntimeError(f"Unable to find version string in {init_file}")

setup(
    name="dynamo-es-stream",
    version=version_match.group(1),
    description=(
        "Lambda handler that indexes DynamoDB stream records "
        "into Elasticsearch"
    ),
    packages=find_packages(include=["dynamo_es_stream", "dynamo_es_stream.*"]),
    install_requires=[
        "boto3>=1.26.0",
        "elasticsearch>=8.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "tenacity>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
            "pytest-cov",
            "moto[dynamodb]>=5.0.0",
        ]
    },
    python_requires=">=3.10",
)
