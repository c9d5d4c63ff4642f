#!/usr/bin/python3

from setuptools import setup


with open("README.md", "r") as f:
    long_description = f.read()


setup(name='partplan',
      version='1.0.0',
      description='Python module for planning storage layouts from AutoYaST-style profiles',
      long_description=long_description,
      long_description_content_type="text/markdown",
      packages=['partplan', 'partplan.devicelibs', 'partplan.devices', 'partplan.formats',
                'partplan.planned', 'partplan.proposal', 'partplan.proposal.planners'],
      install_requires=['attrs'],
      extras_require={'test': ['pytest']},
      classifiers=["Development Status :: 4 - Beta",
                   "Intended Audience :: Developers",
                   "License :: OSI Approved :: GNU General Public License v2 or later (GPLv2+)",
                   "Programming Language :: Python :: 3",
                   "Operating System :: POSIX :: Linux"]
     )
