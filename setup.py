from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="brotech-admin",
    version="0.1.0",
    author="BroTech",
    description="Flask admin dashboard for the BroTech website: messages, pricing, blog and settings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: Flask",
    ],
    python_requires=">=3.9",
    install_requires=[
        "Flask>=3.0.0",
        "python-dotenv>=1.0.0",
        "pymongo>=4.6",
        "boto3>=1.28",
        "google-genai>=1.0.0",
        "Markdown>=3.5",
        "tzlocal>=5.0",
        "tzdata",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-flask>=1.2",
            "mongomock>=4.1",
            "black>=22.0",
            "flake8>=5.0",
        ],
    },
    include_package_data=True,
    package_data={
        "brotech_admin": [
            "modules/*/templates/**/*.html",
        ],
    },
    zip_safe=False,
)
