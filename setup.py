#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="meshmerge",
        packages=find_packages(include=["meshmerge", "meshmerge.*"]),
        python_requires='>3.10.0',
        version="0.1.0",
        license="MIT",
        description="Scene batching: instanced proxies and merged collision",
        author="mirmik",
        author_email="mirmikns@yandex.ru",
        url="https://github.com/mirmik/meshmerge",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["scene", "batching", "instancing", "collision"],
        classifiers=[],
        include_package_data=True,
        install_requires=[
            "numpy",
            "Pillow>=9.0",
            "scipy",
        ],
        extras_require={
            "test": ["pytest"],
        },
        zip_safe=False,
    )
