"""Report modules.

document  -- declarative blocks, tables and style table
tables    -- statistics / annotation -> display tables
renderer  -- reportlab layout of a document to PDF bytes
assembler -- end-to-end pipeline writing the report file
"""
