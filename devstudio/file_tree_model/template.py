"""Seed project used when no local folder is connected and on reset."""

from __future__ import annotations

import json

from .types import DIRECTORY, FILE, TreeNode

_PACKAGE_JSON = json.dumps(
    {
        "name": "vite-app",
        "private": True,
        "version": "0.0.0",
        "type": "module",
        "scripts": {
            "dev": "vite",
            "build": "vite build",
            "preview": "vite preview",
        },
        "dependencies": {
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
        },
        "devDependencies": {
            "@types/react": "^18.2.43",
            "@types/react-dom": "^18.2.17",
            "@vitejs/plugin-react": "^4.2.1",
            "vite": "^5.0.8",
        },
    },
    indent=2,
)

_VITE_CONFIG = """import { defineConfig } from 'vite'
import react from '@vitejs/plugin-react'

// https://vitejs.dev/config/
export default defineConfig({
  plugins: [react()],
  server: {
    host: true,
    port: 3000,
    strictPort: true,
  }
})
"""

_INDEX_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Vite + React App</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.jsx"></script>
  </body>
</html>
"""

_MAIN_JSX = """import React from 'react'
import ReactDOM from 'react-dom/client'
import App from './App.jsx'
import './index.css'

ReactDOM.createRoot(document.getElementById('root')).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>,
)
"""

_APP_JSX = """import { useState } from 'react'
import './App.css'

function App() {
  const [count, setCount] = useState(0)

  return (
    <div className="App">
      <h1>Vite + React</h1>
      <div className="card">
        <button onClick={() => setCount((count) => count + 1)}>
          count is {count}
        </button>
        <p>
          Edit <code>src/App.jsx</code> and save to reload the preview.
        </p>
      </div>
    </div>
  )
}

export default App
"""

_APP_CSS = """.App {
  max-width: 1280px;
  margin: 0 auto;
  padding: 2rem;
  text-align: center;
}

.card {
  padding: 2em;
}

button {
  border-radius: 8px;
  border: 1px solid transparent;
  padding: 0.6em 1.2em;
  font-size: 1em;
  cursor: pointer;
}
"""

_INDEX_CSS = """:root {
  font-family: Inter, system-ui, Avenir, Helvetica, Arial, sans-serif;
  line-height: 1.5;
  color-scheme: light dark;
}

body {
  margin: 0;
  display: flex;
  place-items: center;
  min-width: 320px;
  min-height: 100vh;
}
"""

DEFAULT_PROJECT_FILES: tuple[TreeNode, ...] = (
    TreeNode(path="/package.json", name="package.json", kind=FILE, content=_PACKAGE_JSON, language="json"),
    TreeNode(path="/vite.config.js", name="vite.config.js", kind=FILE, content=_VITE_CONFIG, language="javascript"),
    TreeNode(path="/index.html", name="index.html", kind=FILE, content=_INDEX_HTML, language="html"),
    TreeNode(
        path="/src",
        name="src",
        kind=DIRECTORY,
        children=(
            TreeNode(path="main.jsx", name="main.jsx", kind=FILE, content=_MAIN_JSX, language="javascript"),
            TreeNode(path="App.jsx", name="App.jsx", kind=FILE, content=_APP_JSX, language="javascript"),
            TreeNode(path="App.css", name="App.css", kind=FILE, content=_APP_CSS, language="css"),
            TreeNode(path="index.css", name="index.css", kind=FILE, content=_INDEX_CSS, language="css"),
        ),
    ),
)

DEFAULT_PROJECT_PATHS = frozenset(
    {
        "package.json",
        "vite.config.js",
        "index.html",
        "src",
        "src/main.jsx",
        "src/App.jsx",
        "src/App.css",
        "src/index.css",
    }
)

__all__ = ["DEFAULT_PROJECT_FILES", "DEFAULT_PROJECT_PATHS"]
