"""Sample CWA payloads shared by the test modules."""


def weekly_entry(start, end, value):
    return {
        "startTime": start,
        "endTime": end,
        "elementValue": [{"value": value, "measures": "unit"}],
    }


def short_range_entry(start, end, value):
    return {
        "startTime": start,
        "endTime": end,
        "parameter": {"parameterName": value},
    }


WEEKLY_TIMES = [
    ("2024-05-01 06:00:00", "2024-05-01 18:00:00"),
    ("2024-05-01 18:00:00", "2024-05-02 06:00:00"),
    ("2024-05-02 06:00:00", "2024-05-02 18:00:00"),
]


def make_weekly_payload(name="臺北市", values=None):
    values = values or {
        "Wx": ["多雲", "晴", "短暫陣雨"],
        "PoP12h": [" ", "30", "10"],
        "MinT": ["20", "18", "21"],
        "MaxT": ["28", "25", "29"],
        "T": ["24", "22", "25"],
    }
    return {
        "success": "true",
        "records": {
            "locations": [
                {
                    "datasetDescription": "臺灣各縣市未來1週天氣預報",
                    "location": [
                        {
                            "locationName": name,
                            "weatherElement": [
                                {
                                    "elementName": code,
                                    "time": [
                                        weekly_entry(start, end, value)
                                        for (start, end), value in zip(WEEKLY_TIMES, series)
                                    ],
                                }
                                for code, series in values.items()
                            ],
                        }
                    ],
                }
            ]
        },
    }


SHORT_RANGE_TIMES = [
    ("2024-05-01 06:00:00", "2024-05-01 18:00:00"),
    ("2024-05-01 18:00:00", "2024-05-02 06:00:00"),
    ("2024-05-02 06:00:00", "2024-05-02 18:00:00"),
]


def make_short_range_payload(name="臺北市"):
    values = {
        "Wx": ["多雲", "晴時多雲", "陰"],
        "PoP": ["10", "0", "20"],
        "MinT": ["22", "20", "23"],
        "MaxT": ["29", "26", "30"],
        "CI": ["舒適", "舒適", "悶熱"],
    }
    return {
        "success": "true",
        "records": {
            "datasetDescription": "三十六小時天氣預報",
            "location": [
                {
                    "locationName": name,
                    "weatherElement": [
                        {
                            "elementName": code,
                            "time": [
                                short_range_entry(start, end, value)
                                for (start, end), value in zip(SHORT_RANGE_TIMES, series)
                            ],
                        }
                        for code, series in values.items()
                    ],
                }
            ],
        },
    }


# Current F-D0047 layout: PascalCase keys, Chinese element names, values under
# named ElementValue keys.
NAMED_WEEKLY_TIMES = [
    ("2024-05-01T06:00:00+08:00", "2024-05-01T18:00:00+08:00"),
    ("2024-05-01T18:00:00+08:00", "2024-05-02T06:00:00+08:00"),
    ("2024-05-02T06:00:00+08:00", "2024-05-02T18:00:00+08:00"),
]

NAMED_WEEKLY_ELEMENTS = {
    "天氣現象": ("Weather", ["多雲", "晴", "短暫陣雨"]),
    "12小時降雨機率": ("ProbabilityOfPrecipitation", [" ", "30", "10"]),
    "最低溫度": ("MinTemperature", ["20", "18", "21"]),
    "最高溫度": ("MaxTemperature", ["28", "25", "29"]),
    "平均溫度": ("Temperature", ["24", "22", "25"]),
    "風速": ("WindSpeed", ["3", "2", "4"]),
    "最大舒適度指數": ("MaxComfortIndexDescription", ["舒適", "舒適", "悶熱"]),
}


def named_weekly_entry(start, end, key, value):
    return {
        "StartTime": start,
        "EndTime": end,
        "ElementValue": [{key: value}],
    }


def make_named_weekly_payload(name="臺北市", elements=None):
    elements = elements or NAMED_WEEKLY_ELEMENTS
    return {
        "success": "true",
        "records": {
            "Locations": [
                {
                    "DatasetDescription": "臺灣各縣市鄉鎮未來1週天氣預報",
                    "LocationsName": "臺灣",
                    "Location": [
                        {
                            "LocationName": name,
                            "Geocode": "63",
                            "WeatherElement": [
                                {
                                    "ElementName": element_name,
                                    "Time": [
                                        named_weekly_entry(start, end, key, value)
                                        for (start, end), value in zip(NAMED_WEEKLY_TIMES, series)
                                    ],
                                }
                                for element_name, (key, series) in elements.items()
                            ],
                        }
                    ],
                }
            ]
        },
    }
