from setuptools import setup, find_packages
import sys

if sys.version_info < (3, 9):
    print("Please use python 3.9 or newer.")
    sys.exit(1)


requires = [
    "requests",
    "zope.interface",
    "webob",
]

pyramid_deps = ["pyramid", "python-dotenv"]

test_deps = pyramid_deps + ["pytest"]


setup(
    name="shopflow",
    version="0.1a",
    description="Install handshake and admin api proxy for shop platform apps.",
    install_requires=requires,
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.9",
    extras_require={
        "pyramid": pyramid_deps,
        "test": test_deps,
        "dev": ["flake8", "black"],
    },
    entry_points={
        "console_scripts": ["shopflow = shopflow.web.app:main"],
    },
)
