"""
Setup script for ai-quizzer.

AI Quizzer is a REST service that generates adaptive quizzes for school
subjects, grades submissions and reports on progress:

1. Quiz API - Login, quiz creation, submission, retry and hints
2. Reporting - History, analytics, leaderboards and emailed results
3. Operator CLI - Database setup, token minting and question previews

The 'quizzer' command is the CLI entry point; the API runs under uvicorn.
"""

from setuptools import find_packages, setup

setup(
    name="ai-quizzer",
    version="1.0.0",
    description="Adaptive AI-generated quizzes with scoring, analytics and leaderboards",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["quizzer", "quizzer.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # API
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Cache
        "redis>=5.0.0",
        # Auth
        "PyJWT>=2.8.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizzer=quizzer.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz education adaptive-learning fastapi llm",
)
