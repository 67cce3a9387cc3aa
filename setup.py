from setuptools import setup


setup(
    name="stocksheet",
    version="0.1.0",
    description="Local weekly inventory sheet editor: load .xlsx/.csv, log stock movements, export next week's workbook",
    packages=["stocksheet"],
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
        "streamlit",
    ],
    extras_require={
        "excel-legacy": ["xlrd"],
        "all": ["xlrd"],
    },
)
