from setuptools import setup, find_packages

setup(
    name="audiobook-splitter",
    version="0.1.0",
    description="Split an audiobook into one clip per subtitle cue for flashcards",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pydub>=0.25.1",
        "pillow>=10.0.0",
        "PyYAML>=6.0",
        "srt>=3.5.0",
        "genanki>=0.13.0",
        "audioop-lts; python_version>='3.13'",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "audiobook-splitter=audiobook_splitter.cli:main",
        ],
    },
)
