"""nextcrud -- scaffold Next.js apps and generate CRUD features into them."""

__version__ = "0.1.0"
