from setuptools import setup, find_namespace_packages

setup(
    name="zebra-image-printer",
    version="1.0.0",
    description="Impressão de imagens PNG/JPG em Zebra via ZPL (^GFA) pela porta raw 9100",
    python_requires=">=3.9",
    packages=find_namespace_packages(include=["zebra_printer", "zebra_printer.*"]),
    install_requires=[
        "flask",
        "Pillow>=9.1",
        "urllib3>=1.26",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["zebra-printer=zebra_printer.__main__:main"],
    },
)
