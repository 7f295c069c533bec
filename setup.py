from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="feeflow",
    version="1.0.0",
    author="FeeFlow Developers",
    description="FeeFlow school fee data layer backed by Google Sheets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app"],
    include_package_data=True,
    install_requires=[
        'Flask>=2.3.3',
        'python-dotenv>=1.0.0',
        'WTForms>=3.0.1',
        'Werkzeug>=2.3.7',
        'google-api-python-client>=2.100.0',
        'google-auth>=2.23.0',
        'google-auth-httplib2>=0.1.1',
        'httplib2>=0.22.0',
        'requests>=2.31.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
        ],
    },
    python_requires='>=3.9',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    entry_points={
        'console_scripts': [
            'feeflow=app:main',
        ],
    },
)
