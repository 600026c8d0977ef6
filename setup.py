# -*- coding: utf-8 -
import os
from setuptools import setup, find_packages


def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()


setup(
    name="archbox",
    version=read("archbox/version.txt").strip(),
    description="Configure and boot an Arch Linux guest with Vagrant",
    url="https://github.com/archbox/archbox",
    license="GPL-3.0",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
    ],
    keywords="Vagrant, VirtualBox, Arch Linux, development environment",
    long_description=read("README.rst"),
    packages=find_packages(),
    package_data={"archbox": ["Vagrantfile.j2", "version.txt"]},
    python_requires=">=3.7",
    install_requires=[
        "jsonschema>=3.0",
        "jinja2>=2.10",
        "python-vagrant>=0.5.15",
        "netaddr>=0.7",
        "pyyaml>=5.1",
        "rich>=10.0",
    ],
    extras_require={"test": ["pytest"]},
    include_package_data=True,
)
