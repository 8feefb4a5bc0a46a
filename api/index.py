import os
import sys

# Make the project root importable when deployed as a serverless function
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config_prod import ProductionConfig
from taskflow import create_app

app = create_app(ProductionConfig)

# Vercel entry point
application = app

if __name__ == '__main__':
    app.run(debug=True)
