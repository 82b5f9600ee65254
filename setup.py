"""Install arXiv JWT auth package."""

from setuptools import setup, find_packages

setup(
    name='arxiv-jwt-auth',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    scripts=['bin/generate-jwt-secret'],
    python_requires='>=3.8',
    install_requires=[
        "flask",
        "werkzeug",
        "blinker",
        "pyjwt>=2.4",
        "pytz",
        "click",
    ],
    extras_require={
        'test': [
            "pytest",
            "pytest-mock",
        ],
    },
    zip_safe=False
)
