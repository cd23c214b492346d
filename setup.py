# -*- coding: utf-8 -*-
from setuptools import setup

packages = ["crmdml", "crmdml.clients"]

package_data = {"": ["*"]}

install_requires = ["requests>=2.22,<3.0", "simple-salesforce>=1.11,<2.0"]

extras_require = {"test": ["pytest>=7.0"]}

with open("README.md", "r") as f:
    long_description = f.read()

setup_kwargs = {
    "name": "crmdml",
    "version": "0.1.0",
    "description": "Create, update, upsert and delete exercises against CRM records.",
    "long_description": long_description,
    "long_description_content_type": "text/markdown",
    "packages": packages,
    "package_data": package_data,
    "install_requires": install_requires,
    "extras_require": extras_require,
    "python_requires": ">=3.8,<4.0",
}


setup(**setup_kwargs)
