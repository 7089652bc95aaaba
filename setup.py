from setuptools import setup, find_packages

setup(
    name="commit-generator",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "setuptools>=58.0.0",
        "dulwich>=0.22.0",
        "openai>=1.0.0",
        "python-dotenv>=0.19.0",
        "keyring>=23.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "httpx>=0.23.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'generate-commit=commit_generator.cli:main',
        ],
    },
    description="Generate git commit messages from staged changes",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
)
