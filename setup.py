from setuptools import setup, find_packages

setup(
    name="zambezi-checkout",
    version="0.1.0",
    packages=find_packages(include=["zambezi", "zambezi.*", "checkout", "checkout.*"]),
    include_package_data=True,
    install_requires=[
        "Django>=5.1",
        "djangorestframework>=3.15",
        "django-cors-headers>=4.3",
        "whitenoise>=6.6",
        "python-dotenv>=1.0",
        "requests>=2.31",
        "stripe>=8.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-django>=4.8",
        ],
    },
    author="Zambezi Meats",
    description="Checkout core for the Zambezi Meats storefront: stock reservations, delivery zones, promo codes, orders, payments and invoices.",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "Framework :: Django",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: MIT License"
    ],
    python_requires='>=3.10',
)
