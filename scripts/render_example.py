#!/usr/bin/env python3
"""
Render Example
==============

Renders one hardcoded chart payload straight through the dispatcher, without
the HTTP layer, and writes the decoded PNG to disk.
"""

import asyncio
import base64
from pathlib import Path

from pagesnap.config.logging import get_logger
from pagesnap.config.settings import get_settings
from pagesnap.core.dispatch import RequestDispatcher
from pagesnap.core.rendering.browser_launcher import BrowserLauncher
from pagesnap.core.rendering.page_renderer import PageRenderer

logger = get_logger(__name__)

CHART_HTML = """<!DOCTYPE html>
<html>
   <head>
      <script src='https://code.highcharts.com/10.3.3/highcharts.js'></script>
   </head>
   <body style='margin:0;'>
      <div id='container' style='width: 600px; height: 360px;'></div>
      <script type='text/javascript'>Highcharts.chart('container',{chart:{type: 'column', backgroundColor: '#F4F7FA'},
      title:{text: ''}, xAxis:{categories: ['Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec', 'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun'],
      crosshair: true, labels:{style:{color: '#333333'}}, reversed: false},
      yAxis:{title:{text: ''}, opposite: false, labels:{format: "$value", style:{color: '#333333'}}, gridLineColor: '#D9D9D9'},
      plotOptions:{column:{pointPadding: 0.2, borderWidth: 0, negativeColor: '#379C4F'}, series:{animation: false, states:{hover:{enabled: false}}}},
      series: [{showInLegend: false, data: [122.35, 259.62, 223.93, 217.73, 137.17, 98.99, 79.81, 92.23, 79.46, 78.28, 97.64, 104.01, 137.23], color: '#D6291A'}],
      tooltip:{enabled: false}, credits:{enabled: false}});
      </script>
   </body>
</html>
"""

EXAMPLE_PAYLOAD = {
    "html": CHART_HTML,
    "height": 360,
    "width": 600,
    "imageExpiryTime": 63072000,
    "imageIdentifier": "uYUKFIfXri-1750783761",
}


async def main() -> None:
    settings = get_settings()
    launcher = BrowserLauncher(settings)
    dispatcher = RequestDispatcher(PageRenderer(launcher, settings), settings)

    await launcher.initialize()
    try:
        result = await dispatcher.dispatch_payload(EXAMPLE_PAYLOAD)
    finally:
        await launcher.close()

    output = Path(f"{EXAMPLE_PAYLOAD['imageIdentifier']}.png")
    output.write_bytes(base64.b64decode(result.body))
    logger.info("Example rendered", output=str(output), content_type=result.content_type)


if __name__ == "__main__":
    asyncio.run(main())
