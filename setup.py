#!/usr/bin/env python

from setuptools import setup

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
import s3lite
long_description = "\nUsage\n-----\n\n" + s3lite.__doc__

setup(name="s3lite", version=s3lite.__version__,
      description="Small, dependable Amazon S3 client with multipart uploads",
      long_description=long_description,
      long_description_content_type="text/x-rst",
      packages=["s3lite"],
      python_requires=">=3.9",
      extras_require={"test": ["pytest"]})
