"""Setup script for Swarm Deploy Agent."""

from setuptools import find_packages, setup

with open("requirements.txt") as f:
    requirements = f.read().splitlines()

setup(
    name="swarm-deploy-agent",
    version="1.0.0",
    description="Docker Hub webhook agent that rolls Docker Swarm services to pushed images",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "anyio>=4.0",
        ],
    },
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "swarm-deploy-agent=swarm_deploy_agent.__main__:main",
        ],
    },
)
